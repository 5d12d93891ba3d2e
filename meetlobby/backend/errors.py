"""Error taxonomy for registry access and launch validation."""

from __future__ import annotations

FETCH_ROOMS_FAILED = "Failed to fetch rooms"


class RegistryError(Exception):
    """Registry data is not available for this cycle."""

    user_message = FETCH_ROOMS_FAILED


class RegistryMisconfigured(RegistryError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Room registry configuration is missing: {', '.join(missing)}")
        self.missing = list(missing)


class RegistryUnavailable(RegistryError):
    def __init__(self, detail: str, user_message: str | None = None) -> None:
        super().__init__(detail)
        if user_message:
            self.user_message = user_message


class LaunchError(ValueError):
    field_name: str | None = None


class MissingField(LaunchError):
    def __init__(self, field_name: str) -> None:
        super().__init__(f"{field_name} is required")
        self.field_name = field_name


class RoomNotListed(LaunchError):
    def __init__(self, room_name: str) -> None:
        super().__init__(f"Room {room_name!r} is not in the active room list")
        self.room_name = room_name
