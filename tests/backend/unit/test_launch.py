import re

import pytest

from meetlobby.backend.errors import MissingField, RoomNotListed
from meetlobby.backend.identifiers import decode_passphrase
from meetlobby.backend.launch import (
    E2EEOptions,
    LaunchOrchestrator,
    build_destination,
    custom_connect,
    join_existing,
    quick_start,
)
from meetlobby.backend.models import RoomSummary, SessionCredential
from meetlobby.backend.navigation import InMemoryHistory


def test_quick_start_without_e2ee_has_no_fragment() -> None:
    destination = quick_start(e2ee=E2EEOptions(enabled=False))

    assert re.fullmatch(r"/rooms/[a-z0-9]{4}-[a-z0-9]{4}", destination)
    assert "#" not in destination


def test_quick_start_with_e2ee_appends_encoded_passphrase() -> None:
    destination = quick_start(
        e2ee=E2EEOptions(enabled=True, passphrase="let me in"),
        session_id_factory=lambda: "abcd-1234",
    )

    path, fragment = destination.split("#", maxsplit=1)
    assert path == "/rooms/abcd-1234"
    assert fragment
    assert decode_passphrase(fragment) == "let me in"


def test_quick_start_with_default_passphrase_has_fragment() -> None:
    options = E2EEOptions(enabled=True)

    destination = quick_start(e2ee=options)

    assert len(options.passphrase) == 64
    assert decode_passphrase(destination.split("#", maxsplit=1)[1]) == options.passphrase


def test_e2ee_with_empty_passphrase_is_rejected() -> None:
    with pytest.raises(MissingField) as excinfo:
        quick_start(e2ee=E2EEOptions(enabled=True, passphrase=""))

    assert excinfo.value.field_name == "passphrase"


def test_custom_connect_builds_custom_destination() -> None:
    destination = custom_connect(server_url="wss://demo.livekit.cloud", token="eyJhbGciOi.payload.sig")

    assert destination == "/custom/?liveKitUrl=wss://demo.livekit.cloud&token=eyJhbGciOi.payload.sig"


def test_custom_connect_with_e2ee_appends_fragment() -> None:
    destination = custom_connect(
        server_url="wss://demo.livekit.cloud",
        token="tok",
        e2ee=E2EEOptions(enabled=True, passphrase="secret"),
    )

    base, fragment = destination.split("#", maxsplit=1)
    assert base == "/custom/?liveKitUrl=wss://demo.livekit.cloud&token=tok"
    assert decode_passphrase(fragment) == "secret"


@pytest.mark.parametrize(
    ("server_url", "token", "field_name"),
    [
        ("", "tok", "serverUrl"),
        ("   ", "tok", "serverUrl"),
        ("wss://demo.livekit.cloud", "", "token"),
        ("", "", "serverUrl"),
    ],
)
def test_custom_connect_requires_server_url_and_token(server_url: str, token: str, field_name: str) -> None:
    history = InMemoryHistory()

    with pytest.raises(MissingField) as excinfo:
        LaunchOrchestrator(history).custom_connect(server_url=server_url, token=token)

    assert excinfo.value.field_name == field_name
    assert history.entries == ["/"]


def test_join_existing_targets_listed_room_without_fragment() -> None:
    rooms = [RoomSummary(name="team-sync", participant_count=3, created_at=0)]

    assert join_existing("team-sync", rooms=rooms) == "/rooms/team-sync"


def test_join_existing_rejects_unlisted_or_missing_room() -> None:
    with pytest.raises(RoomNotListed):
        join_existing("ghost", rooms=[])
    with pytest.raises(MissingField):
        join_existing("")


def test_build_destination_escapes_room_names() -> None:
    assert build_destination(SessionCredential(session_id="a b/c")) == "/rooms/a%20b%2Fc"


def test_orchestrator_pushes_destination_to_history() -> None:
    history = InMemoryHistory(initial_url="/?tab=join")

    destination = LaunchOrchestrator(history).join_existing("standup")

    assert destination == "/rooms/standup"
    assert history.current_url == "/rooms/standup"
