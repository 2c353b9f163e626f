"""
Framework-agnostic utilities used by the toolbar:
- PrettyLogger: Human-readable file logging
- DebugConfig / load_config: Settings from env, .env and JSON
- resolve_caller / format_backtrace: Call-stack inspection
"""

from .logger import PrettyLogger
from .config import DebugConfig, load_config, parse_bool
from .callers import resolve_caller, format_backtrace

__all__ = [
    "PrettyLogger",
    "DebugConfig",
    "load_config",
    "parse_bool",
    "resolve_caller",
    "format_backtrace",
]
