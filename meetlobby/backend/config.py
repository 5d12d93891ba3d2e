"""Configuration helpers for backend runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class LobbySettings:
    registry_url: str | None
    api_key: str | None
    api_secret: str | None
    host: str
    port: int
    poll_interval: float
    registry_timeout: float

    @property
    def registry_configured(self) -> bool:
        return bool(self.registry_url and self.api_key and self.api_secret)

    def missing_registry_settings(self) -> list[str]:
        missing: list[str] = []
        if not self.registry_url:
            missing.append("LIVEKIT_URL")
        if not self.api_key:
            missing.append("LIVEKIT_API_KEY")
        if not self.api_secret:
            missing.append("LIVEKIT_API_SECRET")
        return missing


def to_http_url(url: str) -> str:
    """Map a websocket signalling address onto the matching HTTP address."""
    if url.startswith("wss://"):
        return "https://" + url.removeprefix("wss://")
    if url.startswith("ws://"):
        return "http://" + url.removeprefix("ws://")
    return url


def load_settings() -> LobbySettings:
    port_raw = os.getenv("MEETLOBBY_PORT", "8000")
    registry_url = os.getenv("LIVEKIT_URL") or None
    return LobbySettings(
        registry_url=to_http_url(registry_url) if registry_url else None,
        api_key=os.getenv("LIVEKIT_API_KEY") or None,
        api_secret=os.getenv("LIVEKIT_API_SECRET") or None,
        host=os.getenv("MEETLOBBY_HOST", "127.0.0.1"),
        port=int(port_raw),
        poll_interval=float(os.getenv("MEETLOBBY_POLL_INTERVAL", "5.0")),
        registry_timeout=float(os.getenv("MEETLOBBY_REGISTRY_TIMEOUT", "5.0")),
    )
