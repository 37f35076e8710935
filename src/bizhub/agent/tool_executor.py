"""Dispatches tool calls registered in ``bizhub.tools`` and wraps errors."""

import logging
from typing import Mapping

from bizhub.core.schema import (
    DataResult,
    ToolResult,
)
from bizhub.tools import (
    TOOL_REGISTRY,
    ToolExecutionError,
)
from bizhub.tools.host import HostEnvironment

logger = logging.getLogger(__name__)

UNKNOWN_TOOL = "Unknown tool"

__all__ = ["ToolExecutionError", "execute_tool", "UNKNOWN_TOOL"]


async def execute_tool(
    name: str, params: Mapping[str, str] | None, host: HostEnvironment
) -> ToolResult:
    """
    Look up *name* in the registry and run it against *host* with *params*.

    Parameters
    ----------
    name:
        The registered tool name (case-sensitive).
    params:
        Keyword arguments to pass verbatim to the tool function.  If *None*,
        an empty mapping is assumed.
    host:
        Capabilities the tool may act through.

    Returns
    -------
    ToolResult
        Whatever the tool returns.  Unknown tools and failing tools never raise: they come back
        as a ``DataResult`` so the model can read what went wrong and try something else.
    """

    if params is None:
        params = {}

    tool_fn = TOOL_REGISTRY.get(name)
    if tool_fn is None:
        logger.warning("Unknown tool requested: %s", name)
        return DataResult(payload=UNKNOWN_TOOL)

    try:
        logger.info("Executing tool '%s' with params=%s", name, dict(params))
        return await tool_fn(host, **params)
    except TypeError as exc:
        # Wrong or unexpected parameter names
        logger.warning("Argument error while executing tool '%s': %s", name, exc)
        return DataResult(payload=f"Error: Invalid arguments for tool '{name}': {exc}")
    except ToolExecutionError as exc:
        logger.warning("Tool '%s' failed: %s", name, exc)
        return DataResult(payload=f"Error: {exc}")
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Unhandled error in tool '%s'", name)
        return DataResult(payload=f"Error: Tool '{name}' raised an error: {exc}")
