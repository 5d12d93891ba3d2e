"""Room registry clients returning the rooms that currently have participants."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Protocol

import httpx

from meetlobby.backend.config import LobbySettings, to_http_url
from meetlobby.backend.errors import RegistryMisconfigured, RegistryUnavailable
from meetlobby.backend.models import RoomSummary

logger = logging.getLogger(__name__)

ROOMS_PATH = "/rooms"
ACTIVE_ROOMS_PATH = "/api/rooms/active"


class RoomRegistry(Protocol):
    async def list_active_rooms(self) -> list[RoomSummary]:
        """Return rooms with at least one participant, in registry order."""


def _as_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise RegistryUnavailable(f"room record field {field_name} is not numeric: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise RegistryUnavailable(f"room record field {field_name} is not numeric: {value!r}") from exc


def parse_room_record(record: Any) -> RoomSummary:
    if not isinstance(record, dict):
        raise RegistryUnavailable(f"room record is not an object: {record!r}")
    name = record.get("name")
    if not isinstance(name, str) or not name:
        raise RegistryUnavailable(f"room record has no name: {record!r}")
    return RoomSummary(
        name=name,
        participant_count=_as_int(record.get("numParticipants", 0), "numParticipants"),
        created_at=_as_int(record.get("creationTime", 0), "creationTime"),
    )


def filter_active_rooms(records: list[Any]) -> list[RoomSummary]:
    """Map raw room records and keep those with participants, first name wins."""
    active: list[RoomSummary] = []
    seen: set[str] = set()
    for record in records:
        room = parse_room_record(record)
        if room.participant_count <= 0:
            continue
        if room.name in seen:
            logger.warning("Registry returned duplicate room %s; keeping first entry", room.name)
            continue
        seen.add(room.name)
        active.append(room)
    return active


def _room_records(payload: Any) -> list[Any]:
    if isinstance(payload, dict):
        payload = payload.get("rooms", [])
    if not isinstance(payload, list):
        raise RegistryUnavailable("registry payload does not contain a room list")
    return payload


@dataclass
class RoomServiceRegistry:
    url: str
    api_key: str
    api_secret: str
    timeout: float = 5.0
    transport: httpx.AsyncBaseTransport | None = None

    async def list_active_rooms(self) -> list[RoomSummary]:
        endpoint = self.url.rstrip("/") + ROOMS_PATH
        logger.info("Listing rooms from registry at %s", endpoint)
        try:
            async with httpx.AsyncClient(
                auth=(self.api_key, self.api_secret),
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.get(endpoint)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise RegistryUnavailable(f"registry returned status {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise RegistryUnavailable(f"registry request failed: {exc}") from exc
        except ValueError as exc:
            raise RegistryUnavailable("registry returned invalid JSON") from exc

        records = _room_records(payload)
        rooms = filter_active_rooms(records)
        logger.debug("Registry listed %d rooms, %d with participants", len(records), len(rooms))
        return rooms


@dataclass
class LobbyApiRegistry:
    """Reads the active room list through the lobby's own HTTP surface."""

    base_url: str
    timeout: float = 5.0
    transport: httpx.AsyncBaseTransport | None = None

    async def list_active_rooms(self) -> list[RoomSummary]:
        endpoint = self.base_url.rstrip("/") + ACTIVE_ROOMS_PATH
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(endpoint)
                payload = response.json()
        except httpx.HTTPError as exc:
            raise RegistryUnavailable(f"lobby request failed: {exc}") from exc
        except ValueError as exc:
            raise RegistryUnavailable("lobby returned invalid JSON") from exc

        if isinstance(payload, dict) and payload.get("error"):
            raise RegistryUnavailable(
                f"lobby reported status {response.status_code}",
                user_message=str(payload["error"]),
            )
        if response.is_error:
            raise RegistryUnavailable(f"lobby returned status {response.status_code}")
        return [parse_room_record(record) for record in _room_records(payload)]


def create_registry(settings: LobbySettings) -> RoomServiceRegistry:
    if not settings.registry_configured:
        raise RegistryMisconfigured(settings.missing_registry_settings())
    return RoomServiceRegistry(
        url=to_http_url(settings.registry_url or ""),
        api_key=settings.api_key or "",
        api_secret=settings.api_secret or "",
        timeout=settings.registry_timeout,
    )
