"""
Deprecation notices routed to the current request's collector.

Call warn_deprecated() as the first statement of a deprecated function, or
wrap the function with @deprecated. Either way the notice is attributed to
the code that called the deprecated function, and each call site is
reported once per request.

    @deprecated("2.3", "Widgets")
    def render_legacy_widget(widget):
        ...
"""

from functools import wraps
from typing import Callable, Optional

from .collector import get_collector


def warn_deprecated(function: str, version: Optional[str] = None, component: Optional[str] = None):
    """
    Report that ``function`` is deprecated.

    Must be called directly from the deprecated function so the collector
    can find the call site two frames further up.

    Args:
        function: Name of the deprecated function
        version: Version in which it was deprecated
        component: Application or library that deprecated it
    """
    get_collector().deprecated(function, version, component)


def deprecated(version: Optional[str] = None, component: Optional[str] = None) -> Callable:
    """Decorator form of warn_deprecated()."""

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            warn_deprecated(func.__qualname__, version, component)
            return func(*args, **kwargs)

        return wrapper

    return decorator
