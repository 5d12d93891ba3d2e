"""Domain models for the room directory, navigation and launch flows."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class RoomSummary:
    name: str
    participant_count: int
    created_at: int

    def to_payload(self) -> dict[str, object]:
        return {
            "name": self.name,
            "numParticipants": self.participant_count,
            "creationTime": self.created_at,
        }


@dataclass(frozen=True)
class DirectoryState:
    rooms: tuple[RoomSummary, ...] = ()
    is_loading: bool = False
    error: str | None = None
    updated_at: float | None = None

    @property
    def has_loaded(self) -> bool:
        return self.updated_at is not None


class PollStatus(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    READY = "ready"
    FAILED = "failed"


class NavigationMode(str, Enum):
    QUICK_START = "quick-start"
    CUSTOM_CONNECT = "custom-connect"
    JOIN_EXISTING = "join-existing"


@dataclass(frozen=True)
class SessionCredential:
    session_id: str
    server_url: str | None = None
    token: str | None = None
    e2ee_enabled: bool = False
    passphrase: str | None = field(default=None, repr=False)
