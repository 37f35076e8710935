"""Common utility functions for the project."""

import re
from enum import Enum
from typing import Any

_CODE_FENCE = re.compile(r"```(?:json)?")


class AnsiColors(Enum):
    """
    ANSI color codes for terminal output.
    """

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[33m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"


def colored_print(text: str, color: AnsiColors, *args: Any, **kwargs: Any) -> None:
    """
    Print text in color.

    Args:
        text: The text to print
        color: The color to use (AnsiColors enum)
        args: Additional positional arguments for print
        kwargs: Additional keyword arguments for print
    """
    print(f"{color.value}{text}\033[0m", *args, **kwargs)  # ANSI reset at the end


def strip_code_fences(text: str) -> str:
    """
    Remove markdown code fences (```json ... ```) that LLMs like to wrap JSON in.

    Every fence marker is dropped wherever it appears and the result is trimmed, so
    both fenced and bare payloads come out as the bare payload.
    """
    return _CODE_FENCE.sub("", text).strip()
