"""
Debug toolbar for server-rendered Flask applications.

New code should import directly from the subpackages:
    from debugbar.toolbar import DebugToolbar, get_collector
    from debugbar.core import load_config
"""

__version__ = "1.0.0"

from .core import DebugConfig, PrettyLogger, load_config
from .toolbar import (
    DebugCollector,
    DebugLogHandler,
    DebugToolbar,
    debug_scope,
    deprecated,
    enable_debugbar,
    get_collector,
    warn_deprecated,
)

__all__ = [
    "DebugConfig",
    "PrettyLogger",
    "load_config",
    "DebugCollector",
    "DebugLogHandler",
    "DebugToolbar",
    "debug_scope",
    "deprecated",
    "enable_debugbar",
    "get_collector",
    "warn_deprecated",
]
