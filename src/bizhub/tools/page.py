"""Page-control tools: navigation, search, theme, notifications and scrolling."""

import logging
from urllib.parse import quote

from bizhub.config import settings
from bizhub.core.schema import (
    ActionResult,
    ToolResult,
)
from bizhub.tools import (
    ToolExecutionError,
    register_tool,
)
from bizhub.tools.host import (
    HostEnvironment,
    Navigator,
)

logger = logging.getLogger(__name__)

THEMES = ("light", "dark", "system")
ALERT_TYPES = ("success", "error", "info")


def _require_navigator(host: HostEnvironment) -> Navigator:
    if host.navigator is None:
        raise ToolExecutionError("Navigation is not available on this page.")
    return host.navigator


@register_tool("navigate")
async def navigate(host: HostEnvironment, url: str = "") -> ToolResult:
    """
    Go to a page. Relative paths allowed (e.g. 'index.html', 'search.html').
    Params: { "url": "index.html" }
    """
    if url:
        _require_navigator(host).go_to(url)
    return ActionResult()


@register_tool("search")
async def search(host: HostEnvironment, query: str = "") -> ToolResult:
    """
    Use this ONLY if the user explicitly asks to go to the search page or to see search results.
    Params: { "query": "pizza" }
    """
    if not query:
        return ActionResult()

    if host.search_field is not None:
        host.search_field.fill(query)
        host.search_field.submit()
    else:
        target = f"{settings.SEARCH_PAGE}?q={quote(query, safe='')}"
        _require_navigator(host).go_to(target)
    return ActionResult()


@register_tool("setTheme")
async def set_theme(host: HostEnvironment, theme: str = "") -> ToolResult:
    """Switch the colour theme. Params: { "theme": "light" | "dark" | "system" }"""
    if theme not in THEMES:
        raise ToolExecutionError(f"Unsupported theme '{theme}'. Use one of: {', '.join(THEMES)}.")
    if host.theme_switcher is None:
        logger.debug("No theme switcher on this page; ignoring setTheme(%s)", theme)
    else:
        host.theme_switcher.set_theme(theme)
    return ActionResult()


@register_tool("showAlert")
async def show_alert(  # pylint: disable=redefined-builtin
    host: HostEnvironment, message: str = "", type: str = "info"
) -> ToolResult:
    """
    Show a toast notification.
    Params: { "message": "text", "type": "success" | "error" | "info" }
    """
    level = type or "info"
    if level not in ALERT_TYPES:
        raise ToolExecutionError(
            f"Unsupported alert type '{level}'. Use one of: {', '.join(ALERT_TYPES)}."
        )
    if host.notifier is None:
        logger.debug("No notifier on this page; dropping alert %r", message)
    else:
        host.notifier.notify(message, level)
    return ActionResult()


@register_tool("scroll")
async def scroll(host: HostEnvironment, position: str = "") -> ToolResult:
    """Scroll the page. Params: { "position": "top" | "bottom" | "<elementId>" }"""
    if host.scroller is None or not position:
        return ActionResult()

    if position == "top":
        host.scroller.scroll_to_top()
    elif position == "bottom":
        host.scroller.scroll_to_bottom()
    elif not host.scroller.scroll_to_element(position):
        logger.debug("Scroll target '%s' not found on page", position)
    return ActionResult()
