"""FastAPI endpoints for the active room listing and launch destinations."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .config import LobbySettings, load_settings
from .errors import FETCH_ROOMS_FAILED, LaunchError, RegistryError
from .launch import E2EEOptions, custom_connect, join_existing, quick_start
from .navigation import mode_from_tab, tab_for_mode
from .registry import RoomRegistry, create_registry

logger = logging.getLogger(__name__)


class ActiveRoom(BaseModel):
    name: str
    numParticipants: int
    creationTime: int


class ActiveRoomsResponse(BaseModel):
    rooms: list[ActiveRoom]


class QuickStartRequest(BaseModel):
    e2ee: bool = False
    passphrase: str | None = None


class CustomConnectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    server_url: str = Field(default="", alias="serverUrl")
    token: str = ""
    e2ee: bool = False
    passphrase: str | None = None


class JoinRequest(BaseModel):
    room: str = ""


class DestinationResponse(BaseModel):
    destination: str


class NavigationResponse(BaseModel):
    mode: str
    tab: str


def _e2ee_options(enabled: bool, passphrase: str | None) -> E2EEOptions:
    if passphrase is None:
        return E2EEOptions(enabled=enabled)
    return E2EEOptions(enabled=enabled, passphrase=passphrase)


def _launch_error(exc: LaunchError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"error": str(exc), "field": exc.field_name})


def create_app(registry: RoomRegistry | None = None, settings: LobbySettings | None = None) -> FastAPI:
    app = FastAPI(title="Meet Lobby API", version="0.1.0")
    lobby_settings = settings if settings is not None else load_settings()

    def get_registry() -> RoomRegistry:
        if registry is not None:
            return registry
        return create_registry(lobby_settings)

    @app.get("/api/rooms/active", response_model=ActiveRoomsResponse)
    async def active_rooms() -> ActiveRoomsResponse | JSONResponse:
        try:
            rooms = await get_registry().list_active_rooms()
        except RegistryError:
            logger.exception("Error fetching active rooms")
            return JSONResponse(status_code=500, content={"rooms": [], "error": FETCH_ROOMS_FAILED})
        logger.info("Returning %d active rooms", len(rooms))
        return ActiveRoomsResponse(rooms=[ActiveRoom(**room.to_payload()) for room in rooms])

    @app.post("/api/launch/quick-start", response_model=DestinationResponse)
    def launch_quick_start(payload: QuickStartRequest) -> DestinationResponse | JSONResponse:
        try:
            destination = quick_start(e2ee=_e2ee_options(payload.e2ee, payload.passphrase))
        except LaunchError as exc:
            return _launch_error(exc)
        return DestinationResponse(destination=destination)

    @app.post("/api/launch/custom", response_model=DestinationResponse)
    def launch_custom(payload: CustomConnectRequest) -> DestinationResponse | JSONResponse:
        try:
            destination = custom_connect(
                server_url=payload.server_url,
                token=payload.token,
                e2ee=_e2ee_options(payload.e2ee, payload.passphrase),
            )
        except LaunchError as exc:
            return _launch_error(exc)
        return DestinationResponse(destination=destination)

    @app.post("/api/launch/join", response_model=DestinationResponse)
    def launch_join(payload: JoinRequest) -> DestinationResponse | JSONResponse:
        try:
            destination = join_existing(room_name=payload.room)
        except LaunchError as exc:
            return _launch_error(exc)
        return DestinationResponse(destination=destination)

    @app.get("/api/navigation", response_model=NavigationResponse)
    def navigation(tab: str | None = Query(default=None)) -> NavigationResponse:
        mode = mode_from_tab(tab)
        return NavigationResponse(mode=mode.value, tab=tab_for_mode(mode))

    return app


app = create_app()
