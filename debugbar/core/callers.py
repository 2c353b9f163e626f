"""Call-stack helpers for labelling log entries with their origin."""

import sys
import traceback
from typing import Optional

UNKNOWN_CALLER = "unknown"


def resolve_caller(level: int = 2) -> str:
    """
    Name the function ``level`` frames up from the function calling this one.

    Level 1 is the function that calls ``resolve_caller``, level 2 is its
    caller, and so on. Methods are labelled by qualified name
    (``Class.method``), module-level code as ``<module>``.

    Args:
        level: Number of frames to walk up the stack

    Returns:
        The function label, or "unknown" when the stack is not that deep
    """
    try:
        frame = sys._getframe(level)
    except ValueError:
        return UNKNOWN_CALLER

    code = frame.f_code
    # co_qualname is only available from Python 3.11
    return getattr(code, "co_qualname", code.co_name)


def format_backtrace(skip: int = 1, limit: Optional[int] = None) -> str:
    """
    Format the current stack, innermost call last.

    Args:
        skip: Frames to drop from the top (1 drops this function)
        limit: Maximum number of frames to keep

    Returns:
        Plain-text backtrace
    """
    frame = sys._getframe(skip)
    return "".join(traceback.format_stack(frame, limit=limit))
