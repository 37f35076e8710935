"""
Capabilities the tools act through.

Tools never touch a real page or database directly; they receive a :class:`HostEnvironment`
holding whichever of these capabilities the caller can offer.  Any capability may be missing.
"""

from dataclasses import dataclass
from typing import Protocol

from bizhub.store.content_store import ContentStore


class Navigator(Protocol):
    """Moves the active page to another URL (relative paths allowed)."""

    def go_to(self, url: str) -> None: ...


class ThemeSwitcher(Protocol):
    """Switches the colour theme: ``light``, ``dark`` or ``system``."""

    def set_theme(self, theme: str) -> None: ...


class Notifier(Protocol):
    """Shows a transient notification (toast)."""

    def notify(self, message: str, level: str) -> None: ...


class Scroller(Protocol):
    """Scrolls the page."""

    def scroll_to_top(self) -> None: ...

    def scroll_to_bottom(self) -> None: ...

    def scroll_to_element(self, element_id: str) -> bool:
        """Scroll to *element_id*; return False when no such element exists."""
        ...


class SearchField(Protocol):
    """The search box of the current page, when it has one."""

    def fill(self, query: str) -> None: ...

    def submit(self) -> None: ...


@dataclass
class HostEnvironment:
    """Bundle of capabilities handed to every tool."""

    navigator: Navigator | None = None
    theme_switcher: ThemeSwitcher | None = None
    notifier: Notifier | None = None
    scroller: Scroller | None = None
    search_field: SearchField | None = None
    content_store: ContentStore | None = None
