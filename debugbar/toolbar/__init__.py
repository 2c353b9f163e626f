"""
Per-request debug toolbar.

Collects log lines, warnings, deprecation notices, query timings and raw
debug text for one request, and renders them as an inline panel, an HTML
comment, a nested "Debug data" list or a ``debuginfo`` API member.

Quick Start:
    from debugbar.toolbar import DebugCollector

    collector = DebugCollector()
    collector.enable()
    collector.log("cache miss for Main_Page")

    handle = collector.start_query("SELECT * FROM page", "PageStore.load", False)
    # ... run the query ...
    collector.finish_query(handle)

Inside a Flask app, use DebugToolbar and get_collector() instead of
building collectors by hand:

    from debugbar.toolbar import DebugToolbar, get_collector

    DebugToolbar(app)

    @app.route("/")
    def index():
        get_collector().log("rendering index")
        ...
"""

from .collector import (
    DebugCollector,
    LogEntry,
    QueryRecord,
    UNTRACKED_QUERY,
    create_collector,
    get_collector,
    dispose_collector,
)
from .deprecation import warn_deprecated, deprecated
from .formatters import render_html_debug_log, render_debug_comment, format_size, format_summary
from .result import ResultTree, ApiResult
from .gitinfo import GitInfo
from .snapshot import (
    Environment,
    build_snapshot,
    capture_buffered_output,
    render_inline_panel,
    export_to_api_result,
)
from .handler import DebugLogHandler, capture_warnings, debug_scope, debug_line
from .integration import DebugToolbar, FlaskEnvironment, HtmlPage, enable_debugbar

__all__ = [
    # Collection
    "DebugCollector",
    "LogEntry",
    "QueryRecord",
    "UNTRACKED_QUERY",
    "create_collector",
    "get_collector",
    "dispose_collector",
    "warn_deprecated",
    "deprecated",

    # Rendering and export
    "render_html_debug_log",
    "render_debug_comment",
    "format_size",
    "format_summary",
    "ResultTree",
    "ApiResult",
    "GitInfo",
    "Environment",
    "build_snapshot",
    "render_inline_panel",
    "capture_buffered_output",
    "export_to_api_result",

    # Logging bridge
    "DebugLogHandler",
    "capture_warnings",
    "debug_scope",
    "debug_line",

    # Flask
    "DebugToolbar",
    "FlaskEnvironment",
    "HtmlPage",
    "enable_debugbar",
]
