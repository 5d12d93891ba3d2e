"""Identifier and passphrase helpers used by the launch flows."""

from __future__ import annotations

import base64
import secrets
import string

TOKEN_ALPHABET = string.ascii_lowercase + string.digits
DEFAULT_PASSPHRASE_LENGTH = 64
SESSION_ID_SEGMENT_LENGTH = 4
SESSION_ID_SEPARATOR = "-"


def random_token(length: int) -> str:
    """Return ``length`` characters drawn from a lowercase alphanumeric alphabet."""
    if length < 0:
        raise ValueError("length must be non-negative")
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def generate_session_id() -> str:
    """Generate a short, typeable room id such as ``k3f9-x01a``."""
    return SESSION_ID_SEPARATOR.join(
        (random_token(SESSION_ID_SEGMENT_LENGTH), random_token(SESSION_ID_SEGMENT_LENGTH))
    )


def encode_passphrase(raw: str) -> str:
    """Encode a passphrase for a URL fragment (base64url, unpadded).

    This is a transport encoding only and offers no confidentiality.
    """
    encoded = base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")
    return encoded.rstrip("=")


def decode_passphrase(encoded: str) -> str:
    """Reverse :func:`encode_passphrase`."""
    padding = "=" * (-len(encoded) % 4)
    try:
        raw = base64.urlsafe_b64decode(encoded + padding)
        return raw.decode("utf-8")
    except (ValueError, UnicodeDecodeError) as exc:
        raise ValueError("passphrase fragment is not valid base64url") from exc
