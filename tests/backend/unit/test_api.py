import pytest

fastapi = pytest.importorskip("fastapi")
pytest.importorskip("httpx")
from fastapi.testclient import TestClient

from meetlobby.backend.api import create_app
from meetlobby.backend.config import LobbySettings
from meetlobby.backend.errors import RegistryUnavailable
from meetlobby.backend.identifiers import decode_passphrase
from meetlobby.backend.models import RoomSummary


class _StaticRegistry:
    def __init__(self, rooms: list[RoomSummary] | None = None, error: Exception | None = None) -> None:
        self.rooms = rooms or []
        self.error = error

    async def list_active_rooms(self) -> list[RoomSummary]:
        if self.error is not None:
            raise self.error
        return list(self.rooms)


def _unconfigured_settings() -> LobbySettings:
    return LobbySettings(
        registry_url=None,
        api_key=None,
        api_secret=None,
        host="127.0.0.1",
        port=8000,
        poll_interval=5.0,
        registry_timeout=5.0,
    )


def test_active_rooms_returns_registry_rooms() -> None:
    registry = _StaticRegistry(rooms=[RoomSummary(name="alpha", participant_count=2, created_at=1700000000)])
    client = TestClient(create_app(registry=registry))

    response = client.get("/api/rooms/active")

    assert response.status_code == 200
    assert response.json() == {
        "rooms": [{"name": "alpha", "numParticipants": 2, "creationTime": 1700000000}],
    }


def test_active_rooms_hides_upstream_failure_detail() -> None:
    registry = _StaticRegistry(error=RegistryUnavailable("upstream said: 502 bad gateway at 10.0.0.4"))
    client = TestClient(create_app(registry=registry))

    response = client.get("/api/rooms/active")

    assert response.status_code == 500
    assert response.json() == {"rooms": [], "error": "Failed to fetch rooms"}


def test_active_rooms_reports_missing_configuration_as_failure_payload() -> None:
    client = TestClient(create_app(settings=_unconfigured_settings()))

    response = client.get("/api/rooms/active")

    assert response.status_code == 500
    assert response.json() == {"rooms": [], "error": "Failed to fetch rooms"}


def test_quick_start_returns_destination_with_optional_fragment() -> None:
    client = TestClient(create_app(registry=_StaticRegistry()))

    plain = client.post("/api/launch/quick-start", json={"e2ee": False}).json()["destination"]
    encrypted = client.post(
        "/api/launch/quick-start",
        json={"e2ee": True, "passphrase": "shared secret"},
    ).json()["destination"]

    assert plain.startswith("/rooms/")
    assert "#" not in plain
    assert decode_passphrase(encrypted.split("#", maxsplit=1)[1]) == "shared secret"


def test_custom_connect_returns_destination() -> None:
    client = TestClient(create_app(registry=_StaticRegistry()))

    response = client.post(
        "/api/launch/custom",
        json={"serverUrl": "wss://demo.livekit.cloud", "token": "tok"},
    )

    assert response.status_code == 200
    assert response.json()["destination"] == "/custom/?liveKitUrl=wss://demo.livekit.cloud&token=tok"


def test_custom_connect_rejects_missing_token() -> None:
    client = TestClient(create_app(registry=_StaticRegistry()))

    response = client.post("/api/launch/custom", json={"serverUrl": "wss://demo.livekit.cloud", "token": ""})

    assert response.status_code == 422
    assert response.json()["field"] == "token"


def test_join_returns_room_destination() -> None:
    client = TestClient(create_app(registry=_StaticRegistry()))

    response = client.post("/api/launch/join", json={"room": "standup"})

    assert response.status_code == 200
    assert response.json() == {"destination": "/rooms/standup"}


def test_navigation_maps_tab_parameter() -> None:
    client = TestClient(create_app(registry=_StaticRegistry()))

    assert client.get("/api/navigation", params={"tab": "join"}).json() == {"mode": "join-existing", "tab": "join"}
    assert client.get("/api/navigation", params={"tab": "bogus"}).json() == {"mode": "quick-start", "tab": "demo"}
    assert client.get("/api/navigation").json() == {"mode": "quick-start", "tab": "demo"}
