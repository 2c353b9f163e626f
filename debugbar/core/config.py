"""
Toolbar configuration.

Settings come from environment variables (a local ``.env`` file is loaded
with python-dotenv first), optionally overlaid by a JSON config file and,
inside a Flask app, by ``app.config`` keys of the same name.
"""

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import find_dotenv, load_dotenv

ENV_PREFIX = "DEBUGBAR_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def parse_bool(value: Any) -> bool:
    """
    Interpret a config value as a boolean.

    Args:
        value: bool, int or string such as "true", "0", "off"

    Returns:
        The boolean value

    Raises:
        ValueError: If a string value is not a recognised boolean
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean config value: {value!r}")


@dataclass(frozen=True)
class DebugConfig:
    """Settings that gate collection and rendering."""

    # Turns the collector on for every request
    enabled: bool = False
    # Appends the raw debug buffer as an HTML comment
    debug_comments: bool = False
    # Renders the nested "Debug data" list under the page content
    show_debug: bool = False
    # Raw lines carry a leading "<seconds> <memory>M  " token
    debug_timestamps: bool = False
    app_version: Optional[str] = None
    # Commit URL template, e.g. "https://github.com/org/repo/commit/{sha}"
    git_view_url: Optional[str] = None
    log_file: Optional[str] = None

    @property
    def captures_raw_lines(self) -> bool:
        return self.enabled or self.debug_comments or self.show_debug

    def overlay(self, values: Mapping[str, Any]) -> "DebugConfig":
        """
        Return a copy with values taken from a mapping.

        Keys may be bare field names ("show_debug") or prefixed upper-case
        names ("DEBUGBAR_SHOW_DEBUG"). Unknown keys are ignored.

        Args:
            values: Mapping such as ``os.environ``, ``app.config`` or parsed JSON

        Returns:
            New DebugConfig
        """
        changes = {}
        for field in fields(self):
            for key in (field.name, ENV_PREFIX + field.name.upper()):
                if key not in values:
                    continue
                value = values[key]
                if field.type is bool or field.type == "bool":
                    value = parse_bool(value)
                elif value is not None:
                    value = str(value) or None
                changes[field.name] = value
        return replace(self, **changes)


def load_config(config_path: Optional[str] = None, use_dotenv: bool = True) -> DebugConfig:
    """
    Load toolbar configuration from the environment and an optional JSON file.

    The JSON file wins over environment variables.

    Args:
        config_path: Path to a JSON file with config keys
        use_dotenv: Whether to read a ``.env`` file into the environment first

    Returns:
        DebugConfig

    Raises:
        FileNotFoundError: If ``config_path`` is given but does not exist
    """
    if use_dotenv:
        load_dotenv(find_dotenv(usecwd=True))

    config = DebugConfig().overlay(os.environ)

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            config = config.overlay(json.load(f))

    return config
