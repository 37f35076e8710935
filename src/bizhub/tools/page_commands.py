"""
Server-side stand-in for the browser page.

When the assistant runs behind the API it cannot touch the user's page directly.  Instead the
page tools act on a :class:`PageCommandRecorder`, which records each requested UI change as a
:class:`PageCommand`.  The API returns those commands and the browser replays them in order.
"""

from typing import (
    Any,
    Dict,
    Iterable,
    List,
)

from pydantic import (
    BaseModel,
    Field,
)

from bizhub.store.content_store import ContentStore
from bizhub.tools.host import HostEnvironment


class PageCommand(BaseModel):
    """One UI change for the browser to perform."""

    type: str = Field(..., description="navigate | search | setTheme | showAlert | scroll")
    args: Dict[str, Any] = Field(default_factory=dict)


class PageCommandRecorder:
    """
    Implements every page capability by recording what was asked for.

    Parameters
    ----------
    has_search_field:
        Whether the page the user is on has a search box.
    element_ids:
        Ids of elements present on that page (scroll targets).
    """

    def __init__(self, has_search_field: bool = False, element_ids: Iterable[str] = ()):
        self.has_search_field = has_search_field
        self.element_ids = set(element_ids)
        self.commands: List[PageCommand] = []
        self._pending_query = ""

    def _record(self, type_: str, **args: Any) -> None:
        self.commands.append(PageCommand(type=type_, args=args))

    # Navigator
    def go_to(self, url: str) -> None:
        self._record("navigate", url=url)

    # ThemeSwitcher
    def set_theme(self, theme: str) -> None:
        self._record("setTheme", theme=theme)

    # Notifier
    def notify(self, message: str, level: str) -> None:
        self._record("showAlert", message=message, type=level)

    # Scroller
    def scroll_to_top(self) -> None:
        self._record("scroll", position="top")

    def scroll_to_bottom(self) -> None:
        self._record("scroll", position="bottom")

    def scroll_to_element(self, element_id: str) -> bool:
        if element_id not in self.element_ids:
            return False
        self._record("scroll", position=element_id)
        return True

    # SearchField
    def fill(self, query: str) -> None:
        self._pending_query = query

    def submit(self) -> None:
        self._record("search", query=self._pending_query)

    def host(self, content_store: ContentStore | None = None) -> HostEnvironment:
        """Build a :class:`HostEnvironment` whose page capabilities all record into this object."""
        return HostEnvironment(
            navigator=self,
            theme_switcher=self,
            notifier=self,
            scroller=self,
            search_field=self if self.has_search_field else None,
            content_store=content_store,
        )
