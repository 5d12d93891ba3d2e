"""Launch flows turning tab input into a meeting destination."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable
from urllib.parse import quote

from meetlobby.backend.errors import MissingField, RoomNotListed
from meetlobby.backend.identifiers import (
    DEFAULT_PASSPHRASE_LENGTH,
    encode_passphrase,
    generate_session_id,
    random_token,
)
from meetlobby.backend.models import RoomSummary, SessionCredential
from meetlobby.backend.navigation import History


def _default_passphrase() -> str:
    return random_token(DEFAULT_PASSPHRASE_LENGTH)


@dataclass
class E2EEOptions:
    enabled: bool = False
    passphrase: str = field(default_factory=_default_passphrase, repr=False)


def room_destination(room_name: str) -> str:
    return f"/rooms/{quote(room_name, safe='')}"


def build_destination(credential: SessionCredential) -> str:
    """Serialize a credential into ``/rooms/...`` or ``/custom/?...`` with an optional fragment."""
    if credential.server_url is not None:
        server_url = quote(credential.server_url, safe=":/")
        token = quote(credential.token or "", safe="")
        destination = f"/custom/?liveKitUrl={server_url}&token={token}"
    else:
        destination = room_destination(credential.session_id)
    if credential.e2ee_enabled:
        if not credential.passphrase:
            raise MissingField("passphrase")
        destination = f"{destination}#{encode_passphrase(credential.passphrase)}"
    return destination


def _credential_e2ee(e2ee: E2EEOptions | None) -> tuple[bool, str | None]:
    if e2ee is None or not e2ee.enabled:
        return False, None
    if not e2ee.passphrase:
        raise MissingField("passphrase")
    return True, e2ee.passphrase


def quick_start(
    e2ee: E2EEOptions | None = None,
    session_id_factory: Callable[[], str] = generate_session_id,
) -> str:
    enabled, passphrase = _credential_e2ee(e2ee)
    credential = SessionCredential(
        session_id=session_id_factory(),
        e2ee_enabled=enabled,
        passphrase=passphrase,
    )
    return build_destination(credential)


def custom_connect(server_url: str, token: str, e2ee: E2EEOptions | None = None) -> str:
    server_url = (server_url or "").strip()
    token = (token or "").strip()
    if not server_url:
        raise MissingField("serverUrl")
    if not token:
        raise MissingField("token")
    enabled, passphrase = _credential_e2ee(e2ee)
    credential = SessionCredential(
        session_id="",
        server_url=server_url,
        token=token,
        e2ee_enabled=enabled,
        passphrase=passphrase,
    )
    return build_destination(credential)


def join_existing(room_name: str, rooms: Iterable[RoomSummary] | None = None) -> str:
    """Join a listed room; the joined session keeps its own encryption state."""
    if not room_name:
        raise MissingField("room")
    if rooms is not None and room_name not in {room.name for room in rooms}:
        raise RoomNotListed(room_name)
    return build_destination(SessionCredential(session_id=room_name))


class LaunchOrchestrator:
    def __init__(self, history: History) -> None:
        self._history = history

    def _go(self, destination: str) -> str:
        self._history.push(destination)
        return destination

    def quick_start(self, e2ee: E2EEOptions | None = None) -> str:
        return self._go(quick_start(e2ee=e2ee))

    def custom_connect(self, server_url: str, token: str, e2ee: E2EEOptions | None = None) -> str:
        return self._go(custom_connect(server_url=server_url, token=token, e2ee=e2ee))

    def join_existing(self, room_name: str, rooms: Iterable[RoomSummary] | None = None) -> str:
        return self._go(join_existing(room_name=room_name, rooms=rooms))
