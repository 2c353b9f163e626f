"""
Snapshot export.

Combines what a DebugCollector gathered with facts about the running
process and the current request, then hands the result to the browser as an
inline script or grafts it into an API result tree.
"""

import os
import platform
import re
import sys
import time
from typing import Dict, List, Optional

import psutil
from jinja2.utils import htmlsafe_json_dumps
from markupsafe import Markup

from .. import __version__
from .collector import DebugCollector
from .formatters import format_size, render_debug_comment
from .gitinfo import GitInfo
from .result import CONTENT_KEY, ResultTree

# Not available on Windows, where psutil reports the peak instead
if sys.platform != "win32":
    import resource

OUTPUT_COMPLETE_MESSAGE = "debugbar output complete"

# Key of the client-side config object the panel script reads
CONFIG_KEY = "debugInfo"

INLINE_SCRIPT = Markup(
    "<script>(window.debugbarConfig = window.debugbarConfig || {{}})[{}] = {};</script>"
)

# Buffered output is split into fragments on HTML or plain line breaks
OUTPUT_LINE_BREAK = re.compile(r"<br\s*/?>|\n")


class Environment:
    """
    Facts about the process and the current request.

    The base class knows nothing about a request; web integrations subclass
    it and override request_info().
    """

    def __init__(self, app_version: Optional[str] = None, git: Optional[GitInfo] = None):
        """
        Args:
            app_version: Version reported for the application
            git: Version-control lookup (defaults to the working directory)
        """
        self.app_version = app_version or __version__
        self.git = git or GitInfo()
        self._process = psutil.Process()

    def request_info(self) -> Dict:
        """Return method, url, headers and params of the current request."""
        return {"method": None, "url": None, "headers": {}, "params": {}}

    def format_size(self, size: float) -> str:
        return format_size(size)

    def memory_usage(self) -> int:
        """Resident memory of this process in bytes."""
        return self._process.memory_info().rss

    def peak_memory_usage(self) -> int:
        """Highest resident memory of this process in bytes."""
        info = self._process.memory_info()
        # Only reported on Windows
        peak = getattr(info, "peak_wset", None)
        if peak is None:
            peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
            # ru_maxrss is in kilobytes everywhere but macOS
            if sys.platform != "darwin":
                peak *= 1024
        return max(peak, info.rss)

    def included_files(self) -> List[str]:
        """Source files of every module imported so far, in import order."""
        files = []
        seen = set()
        for module in list(sys.modules.values()):
            path = getattr(module, "__file__", None)
            if path and path not in seen:
                seen.add(path)
                files.append(path)
        return files


def get_files_included(env: Environment) -> List[Dict[str, str]]:
    """
    List loaded source files with their formatted size.

    Files that can no longer be read are left out.
    """
    file_list = []
    for path in env.included_files():
        try:
            size = os.stat(path).st_size
        except OSError:
            continue
        file_list.append({"name": path, "size": env.format_size(size)})
    return file_list


def build_snapshot(collector: DebugCollector, env: Environment) -> Dict:
    """
    Assemble everything the toolbar shows for this request.

    Logs a final "output complete" line first, so the snapshot records when
    it was taken.

    Args:
        collector: The request's collector
        env: Process and request facts

    Returns:
        Snapshot dictionary, or {} when the collector is disabled
    """
    if not collector.enabled:
        return {}

    collector.log(OUTPUT_COMPLETE_MESSAGE)

    return {
        "appVersion": env.app_version,
        "pythonVersion": platform.python_version(),
        "gitRevision": env.git.head_sha1(),
        "gitBranch": env.git.current_branch(),
        "gitViewUrl": env.git.head_view_url(),
        "time": time.time() - collector.request_start,
        "log": [entry.to_dict() for entry in collector.get_entries()],
        "debugLog": list(collector.get_raw_lines()),
        "queries": [query.to_dict() for query in collector.get_queries()],
        "request": env.request_info(),
        "memory": env.format_size(env.memory_usage()),
        "memoryPeak": env.format_size(env.peak_memory_usage()),
        "includes": get_files_included(env),
    }


def render_inline_panel(collector: DebugCollector, env: Environment) -> str:
    """
    Render the HTML appended to a page for the toolbar.

    When the collector is enabled this is a script handing the snapshot to
    the client-side panel. When debug comments are configured the raw debug
    buffer follows as an HTML comment, whether or not the collector is
    enabled.

    Returns:
        HTML fragment (possibly empty)
    """
    html = ""

    if collector.enabled:
        snapshot = build_snapshot(collector, env)
        html = str(INLINE_SCRIPT.format(
            htmlsafe_json_dumps(CONFIG_KEY),
            htmlsafe_json_dumps(snapshot, default=str)
        ))

    if collector.config.debug_comments:
        html += render_debug_comment(collector.get_raw_lines())

    return html


def capture_buffered_output(collector: DebugCollector, buffered_output: Optional[str] = None):
    """
    Move buffered output into the raw debug buffer as plain-text lines.

    Args:
        collector: The request's collector
        buffered_output: Output to move (defaults to, and empties, collector.output)
    """
    if buffered_output is None:
        buffered_output = collector.output.getvalue()
        collector.output.seek(0)
        collector.output.truncate()

    for fragment in OUTPUT_LINE_BREAK.split(buffered_output):
        if fragment.strip():
            collector.capture_raw_line(Markup(fragment).striptags())


def export_to_api_result(
    collector: DebugCollector,
    env: Environment,
    result: ResultTree,
    buffered_output: Optional[str] = None
):
    """
    Attach the snapshot to an API result under ``debuginfo``.

    Output already buffered for the response is stripped of markup and moved
    into the raw debug buffer first, since a structured response cannot show
    it.

    Args:
        collector: The request's collector
        env: Process and request facts
        result: Result tree of the API response
        buffered_output: Output written so far (defaults to collector.output)
    """
    if not collector.enabled:
        return

    capture_buffered_output(collector, buffered_output)

    snapshot = build_snapshot(collector, env)
    snapshot["debugLog"] = [{CONTENT_KEY: text} for text in snapshot["debugLog"]]

    result.set_indexed_tag_name(("debuginfo",), "debuginfo")
    result.set_indexed_tag_name(("debuginfo", "log"), "line")
    result.set_indexed_tag_name(("debuginfo", "debugLog"), "msg")
    result.set_indexed_tag_name(("debuginfo", "queries"), "query")
    result.set_indexed_tag_name(("debuginfo", "includes"), "queries")
    result.add_value((), "debuginfo", snapshot)
