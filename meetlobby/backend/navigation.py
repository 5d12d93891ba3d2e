"""Tab selection derived from, and written back to, the page URL."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol
from urllib.parse import parse_qsl, unquote_plus, urlsplit, urlunsplit

from meetlobby.backend.models import NavigationMode

TAB_PARAM = "tab"

_TAB_BY_MODE = {
    NavigationMode.QUICK_START: "demo",
    NavigationMode.CUSTOM_CONNECT: "custom",
    NavigationMode.JOIN_EXISTING: "join",
}
_MODE_BY_TAB = {
    "custom": NavigationMode.CUSTOM_CONNECT,
    "join": NavigationMode.JOIN_EXISTING,
}


class History(Protocol):
    @property
    def current_url(self) -> str:
        """URL currently shown by the host."""

    def push(self, url: str) -> None:
        """Navigate the host to ``url`` and make it current."""


@dataclass
class InMemoryHistory:
    initial_url: str = "/"
    entries: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.entries:
            self.entries.append(self.initial_url)

    @property
    def current_url(self) -> str:
        return self.entries[-1]

    def push(self, url: str) -> None:
        self.entries.append(url)


def mode_from_tab(tab: str | None) -> NavigationMode:
    return _MODE_BY_TAB.get(tab or "", NavigationMode.QUICK_START)


def tab_for_mode(mode: NavigationMode) -> str:
    return _TAB_BY_MODE[mode]


def mode_from_url(url: str) -> NavigationMode:
    query = parse_qsl(urlsplit(url).query, keep_blank_values=True)
    tab = next((value for key, value in query if key == TAB_PARAM), None)
    return mode_from_tab(tab)


def url_with_mode(url: str, mode: NavigationMode) -> str:
    """Return ``url`` with only its ``tab`` parameter set to ``mode``."""
    parts = urlsplit(url)
    tab_pair = f"{TAB_PARAM}={tab_for_mode(mode)}"
    rewritten: list[str] = []
    replaced = False
    for pair in parts.query.split("&") if parts.query else []:
        if unquote_plus(pair.split("=", 1)[0]) != TAB_PARAM:
            rewritten.append(pair)
        elif not replaced:
            rewritten.append(tab_pair)
            replaced = True
    if not replaced:
        rewritten.append(tab_pair)
    return urlunsplit(parts._replace(query="&".join(rewritten)))


class NavigationController:
    """Reads the active mode from the history's URL and writes mode changes through it."""

    def __init__(self, history: History) -> None:
        self._history = history

    @property
    def mode(self) -> NavigationMode:
        return mode_from_url(self._history.current_url)

    def select_mode(self, mode: NavigationMode) -> str:
        target = url_with_mode(self._history.current_url, mode)
        if target != self._history.current_url:
            self._history.push(target)
        return target
