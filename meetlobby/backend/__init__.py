"""Backend package for the meeting lobby."""

from .config import LobbySettings, load_settings
from .directory import DirectoryPoller, format_age, render_directory
from .errors import MissingField, RegistryMisconfigured, RegistryUnavailable, RoomNotListed
from .identifiers import decode_passphrase, encode_passphrase, generate_session_id, random_token
from .launch import E2EEOptions, LaunchOrchestrator, custom_connect, join_existing, quick_start
from .models import DirectoryState, NavigationMode, RoomSummary, SessionCredential
from .navigation import InMemoryHistory, NavigationController
from .registry import LobbyApiRegistry, RoomServiceRegistry, create_registry

__all__ = [
    "create_registry",
    "custom_connect",
    "decode_passphrase",
    "DirectoryPoller",
    "DirectoryState",
    "E2EEOptions",
    "encode_passphrase",
    "format_age",
    "generate_session_id",
    "InMemoryHistory",
    "join_existing",
    "LaunchOrchestrator",
    "load_settings",
    "LobbyApiRegistry",
    "LobbySettings",
    "MissingField",
    "NavigationController",
    "NavigationMode",
    "quick_start",
    "random_token",
    "RegistryMisconfigured",
    "RegistryUnavailable",
    "render_directory",
    "RoomNotListed",
    "RoomServiceRegistry",
    "RoomSummary",
    "SessionCredential",
]
