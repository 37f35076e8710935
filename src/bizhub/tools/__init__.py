"""
Registry of the assistant's tools.

Each tool is a coroutine taking the :class:`~bizhub.tools.host.HostEnvironment` first, then
string keyword parameters, and returning a ``ToolResult``.  Tools are looked up by the exact
(case-sensitive) name the model writes in the ``tool`` field of its JSON reply.
"""

import inspect
import logging
from typing import (
    Callable,
    Dict,
    List,
    Mapping,
    TypedDict,
)

logger = logging.getLogger(__name__)

TOOL_REGISTRY: Dict[str, Callable] = {}
"""Tool coroutines by name, in registration order."""


class ToolExecutionError(RuntimeError):
    """Raised by a tool when it cannot carry out the request."""


def register_tool(name: str) -> Callable:
    """
    Decorator adding the wrapped coroutine to :data:`TOOL_REGISTRY` under *name*.

    Usage::

        @register_tool("findBusiness")
        async def find_business(host, query: str = "") -> ToolResult:
            ...

    Raises
    ------
    ValueError
        If *name* is already taken.
    """
    if name in TOOL_REGISTRY:
        raise ValueError(f"Tool '{name}' is already registered.")
    logger.debug("Registering tool '%s'", name)

    def decorator(fn: Callable) -> Callable:
        TOOL_REGISTRY[name] = fn
        return fn

    return decorator


class ToolSchema(TypedDict):
    """What the model is told about one tool."""

    description: str
    parameters: List[str]


def get_tool_schemas() -> Mapping[str, ToolSchema]:
    """Describe every registered tool from its signature and docstring."""
    schemas: Dict[str, ToolSchema] = {}
    for name, fn in TOOL_REGISTRY.items():
        params = list(inspect.signature(fn).parameters)[1:]  # skip host
        doc = inspect.getdoc(fn) or ""
        schemas[name] = {"description": " ".join(doc.split()), "parameters": params}
    return schemas


# Built-in tools register themselves on import.
from bizhub.tools import (  # noqa: E402  pylint: disable=wrong-import-position
    directory,
    page,
)

__all__ = [
    "TOOL_REGISTRY",
    "ToolExecutionError",
    "register_tool",
    "get_tool_schemas",
    "directory",
    "page",
]
