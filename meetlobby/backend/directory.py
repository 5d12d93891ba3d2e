"""Directory poller keeping the active room list fresh for the join view."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
import logging
import time
from typing import Callable

from meetlobby.backend.errors import FETCH_ROOMS_FAILED, RegistryError
from meetlobby.backend.launch import room_destination
from meetlobby.backend.models import DirectoryState, PollStatus, RoomSummary
from meetlobby.backend.registry import RoomRegistry

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0
LOADING_MESSAGE = "Loading active rooms..."
EMPTY_MESSAGE = "No active meetings found. Start a new meeting from the Demo tab!"


def format_age(created_at: float, now: float | None = None) -> str:
    """Render the time since ``created_at`` as ``30s ago``, ``2m ago`` or ``2h ago``."""
    current = time.time() if now is None else now
    seconds = max(0, int(current - created_at))
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    return f"{seconds // 3600}h ago"


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    summary: str
    destination: str


@dataclass(frozen=True)
class DirectoryView:
    status_line: str | None
    error: str | None
    entries: tuple[DirectoryEntry, ...]


def describe_room(room: RoomSummary, now: float | None = None) -> str:
    plural = "" if room.participant_count == 1 else "s"
    return f"{room.participant_count} participant{plural} • Created {format_age(room.created_at, now)}"


def render_directory(state: DirectoryState, now: float | None = None) -> DirectoryView:
    """Derive what the join view shows for a directory snapshot.

    The listing from the last successful cycle stays visible while a new cycle
    runs or after one fails. The loading line only appears before any data has
    arrived. The empty-state line only appears once the latest cycle has
    finished successfully with no rooms.
    """
    entries = tuple(
        DirectoryEntry(
            name=room.name,
            summary=describe_room(room, now),
            destination=room_destination(room.name),
        )
        for room in state.rooms
    )
    status_line: str | None = None
    if state.is_loading and not state.has_loaded:
        status_line = LOADING_MESSAGE
    elif state.has_loaded and not state.is_loading and not state.rooms and state.error is None:
        status_line = EMPTY_MESSAGE
    return DirectoryView(status_line=status_line, error=state.error, entries=entries)


class DirectoryPoller:
    """Polls a room registry on a fixed cadence while the join view is active.

    At most one poll is in flight at a time. Deactivation cancels the timer
    handle and any running poll; results that land afterwards are discarded.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        interval: float = DEFAULT_POLL_INTERVAL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._registry = registry
        self.interval = interval
        self._clock = clock
        self._state = DirectoryState()
        self._status = PollStatus.IDLE
        self._active = False
        self._in_flight = False
        self._generation = 0
        self._timer: asyncio.TimerHandle | None = None
        self._poll_task: asyncio.Task[bool] | None = None
        self._settled: tuple[PollStatus, str | None] = (PollStatus.IDLE, None)

    @property
    def state(self) -> DirectoryState:
        return self._state

    @property
    def status(self) -> PollStatus:
        return self._status

    @property
    def is_active(self) -> bool:
        return self._active

    def activate(self) -> None:
        if self._active:
            return
        self._active = True
        logger.debug("Directory poller activated (interval %.1fs)", self.interval)
        self.request_refresh()
        self._arm_timer()

    def deactivate(self) -> None:
        if not self._active:
            return
        self._active = False
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._poll_task is not None and not self._poll_task.done():
            self._poll_task.cancel()
        self._poll_task = None
        self._in_flight = False
        self._state = replace(self._state, is_loading=False)
        self._status = PollStatus.IDLE
        logger.debug("Directory poller deactivated")

    def request_refresh(self) -> bool:
        """Schedule a poll cycle unless one is already running."""
        if not self._begin_cycle():
            return False
        self._poll_task = asyncio.get_running_loop().create_task(self._poll(self._generation))
        return True

    async def refresh(self) -> bool:
        """Run a poll cycle now; returns False when skipped or failed."""
        if not self._begin_cycle():
            return False
        return await self._poll(self._generation)

    async def wait_for_cycle(self) -> DirectoryState:
        task = self._poll_task
        if task is not None and not task.done():
            await asyncio.wait({task})
        return self._state

    async def __aenter__(self) -> DirectoryPoller:
        self.activate()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.deactivate()

    def _arm_timer(self) -> None:
        self._timer = asyncio.get_running_loop().call_later(self.interval, self._on_tick)

    def _on_tick(self) -> None:
        self._timer = None
        if not self._active:
            return
        self.request_refresh()
        self._arm_timer()

    def _begin_cycle(self) -> bool:
        if not self._active or self._in_flight:
            return False
        self._in_flight = True
        self._settled = (self._status, self._state.error)
        self._status = PollStatus.POLLING
        self._state = replace(self._state, is_loading=True, error=None)
        return True

    async def _poll(self, generation: int) -> bool:
        """Run one registry fetch and fold its outcome into the directory state.

        Registry failures become the user-facing error. Any other exception
        from the registry is logged at ERROR with its traceback and reported
        the same way. A cancelled poll restores the state it started from.
        """
        error_message: str | None = None
        rooms: list[RoomSummary] = []
        try:
            rooms = await self._registry.list_active_rooms()
        except RegistryError as exc:
            logger.warning("Active room poll failed: %s", exc)
            error_message = exc.user_message
        except Exception:
            logger.exception("Active room poll raised unexpectedly")
            error_message = FETCH_ROOMS_FAILED
        except asyncio.CancelledError:
            if generation == self._generation:
                self._in_flight = False
                self._status, previous_error = self._settled
                self._state = replace(self._state, is_loading=False, error=previous_error)
            raise

        if generation != self._generation:
            return False
        self._in_flight = False
        if error_message is not None:
            self._state = replace(self._state, is_loading=False, error=error_message)
            self._status = PollStatus.FAILED
            return False
        self._state = DirectoryState(
            rooms=tuple(rooms),
            is_loading=False,
            error=None,
            updated_at=self._clock(),
        )
        self._status = PollStatus.READY
        return True
