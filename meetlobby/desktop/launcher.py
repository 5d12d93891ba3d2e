"""Desktop launcher for the meeting lobby using PyWebView."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import subprocess
import sys
import time
import webbrowser
from pathlib import Path
from urllib.parse import urljoin

from urllib import error, request

from meetlobby.backend.config import LobbySettings, load_settings
from meetlobby.backend.directory import DirectoryPoller, DirectoryView, render_directory
from meetlobby.backend.errors import LaunchError
from meetlobby.backend.launch import E2EEOptions, LaunchOrchestrator
from meetlobby.backend.logging_config import setup_logging
from meetlobby.backend.models import DirectoryState, NavigationMode
from meetlobby.backend.navigation import InMemoryHistory, NavigationController, mode_from_tab
from meetlobby.backend.registry import LobbyApiRegistry

ROOT_DIR = Path(__file__).resolve().parents[2]

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Meeting lobby launcher")
    parser.add_argument("--tab", choices=["demo", "custom", "join"], default="demo")
    parser.add_argument("--server", default="http://127.0.0.1:8000")
    parser.add_argument("--app-url", default="")
    parser.add_argument("--e2ee", action="store_true")
    parser.add_argument("--passphrase", default=None)
    parser.add_argument("--livekit-url", default="")
    parser.add_argument("--token", default="")
    parser.add_argument("--room", default="")
    parser.add_argument("--start-server", action="store_true")
    parser.add_argument("--no-open", action="store_true")
    return parser.parse_args(argv)


def wait_for_server(server_url: str, timeout_s: float = 8.0) -> bool:
    start = time.time()
    while time.time() - start < timeout_s:
        try:
            with request.urlopen(f"{server_url}/docs", timeout=0.5) as response:
                if int(response.status) < 500:
                    return True
        except (error.URLError, TimeoutError):
            pass
        time.sleep(0.2)
    return False


def maybe_start_server(server_url: str) -> subprocess.Popen[str] | None:
    env = os.environ.copy()
    host_port = server_url.removeprefix("http://")
    host, port = host_port.split(":", maxsplit=1)
    command = [
        sys.executable,
        "-m",
        "uvicorn",
        "meetlobby.backend.api:app",
        "--host",
        host,
        "--port",
        port,
    ]
    process = subprocess.Popen(command, cwd=str(ROOT_DIR), env=env)
    if wait_for_server(server_url):
        return process
    process.terminate()
    return None


def e2ee_from_args(args: argparse.Namespace) -> E2EEOptions:
    if args.passphrase is None:
        return E2EEOptions(enabled=args.e2ee)
    return E2EEOptions(enabled=args.e2ee, passphrase=args.passphrase)


def build_poller(server_url: str, settings: LobbySettings | None = None) -> DirectoryPoller:
    lobby_settings = settings if settings is not None else load_settings()
    registry = LobbyApiRegistry(base_url=server_url, timeout=lobby_settings.registry_timeout)
    return DirectoryPoller(registry, interval=lobby_settings.poll_interval)


async def fetch_directory(server_url: str, poller: DirectoryPoller | None = None) -> DirectoryState:
    """Run the join view for a single poll cycle and return what it saw."""
    directory = poller if poller is not None else build_poller(server_url)
    async with directory:
        return await directory.wait_for_cycle()


def format_directory(view: DirectoryView) -> list[str]:
    lines: list[str] = []
    if view.status_line:
        lines.append(view.status_line)
    if view.error:
        lines.append(f"Error: {view.error}")
    for entry in view.entries:
        lines.append(f"{entry.name}  ({entry.summary})  -> {entry.destination}")
    return lines


def resolve_destination(args: argparse.Namespace, history: InMemoryHistory) -> str | None:
    navigation = NavigationController(history)
    navigation.select_mode(mode_from_tab(args.tab))
    orchestrator = LaunchOrchestrator(history)

    if navigation.mode is NavigationMode.CUSTOM_CONNECT:
        return orchestrator.custom_connect(
            server_url=args.livekit_url,
            token=args.token,
            e2ee=e2ee_from_args(args),
        )
    if navigation.mode is NavigationMode.JOIN_EXISTING:
        state = asyncio.run(fetch_directory(args.server))
        if not args.room:
            for line in format_directory(render_directory(state)):
                print(line)
            return None
        rooms = state.rooms if state.has_loaded else None
        return orchestrator.join_existing(room_name=args.room, rooms=rooms)
    return orchestrator.quick_start(e2ee=e2ee_from_args(args))


def open_ui(url: str, title: str) -> None:
    try:
        import webview

        webview.create_window(title, url=url, width=1280, height=860)
        webview.start()
    except Exception:
        webbrowser.open(url)


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = parse_args(argv)

    server_process: subprocess.Popen[str] | None = None
    if args.start_server:
        server_process = maybe_start_server(args.server)
        if server_process is None:
            print("Server could not be started.", file=sys.stderr)
            return 1

    try:
        history = InMemoryHistory(initial_url=f"{args.server}/")
        try:
            destination = resolve_destination(args, history)
        except LaunchError as exc:
            print(str(exc), file=sys.stderr)
            return 2
        if destination is None:
            return 0

        url = urljoin(args.app_url or args.server, destination)
        logger.info("Launching %s", url.split("#", maxsplit=1)[0])
        if args.no_open:
            print(url)
        else:
            open_ui(url=url, title="Meet")
    finally:
        if server_process is not None:
            server_process.terminate()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
