"""
Recognise tool calls in model output.

A tool call is a reply that, once markdown code fences are stripped, is a single JSON object
of the form::

    {"tool": "<name>", "params": { ... }, "response": "<optional message to the user>"}

Anything else is an ordinary answer.  :func:`parse_tool_invocation` returns ``None`` in that case,
so callers branch on the return value instead of catching exceptions.
"""

import json
import logging
from typing import Optional

from pydantic import ValidationError

from bizhub.common import strip_code_fences
from bizhub.core.schema import ToolInvocation

logger = logging.getLogger(__name__)


def parse_tool_invocation(text: str) -> Optional[ToolInvocation]:
    """Return the :class:`ToolInvocation` encoded in *text*, or ``None`` for a plain answer."""
    cleaned = strip_code_fences(text)
    if not (cleaned.startswith("{") and cleaned.endswith("}")):
        return None

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.debug("Reply looks like JSON but does not parse; treating as text")
        return None

    if not isinstance(data, dict) or not data.get("tool"):
        return None

    try:
        return ToolInvocation.model_validate(data)
    except ValidationError as exc:
        logger.debug("Reply has a 'tool' field but is not a valid tool call: %s", exc)
        return None
