"""
Per-request debug collector.

Accumulates log lines, warnings, deprecation notices, query timings and raw
debug text while a request is processed. Everything is a no-op until the
collector is enabled, so instrumentation calls can stay in production code.
"""

import io
import time
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Set, Tuple

from markupsafe import Markup, escape

from ..core.callers import format_backtrace, resolve_caller
from ..core.config import DebugConfig
from .formatters import render_html_debug_log

# Frames between resolve_caller() and the code that called a collector
# method: the collector method itself (1), then its caller (2).
DIRECT_CALLER_LEVEL = 2

# Deprecation chain: DebugCollector.deprecated (1) -> warn_deprecated (2)
# -> the deprecated function (3) -> the code that called it (4).
DEPRECATION_CALLER_LEVEL = 4

# Handle returned by start_query() when nothing is being tracked
UNTRACKED_QUERY = -1

# Client-side script that renders the panel from the inline snapshot
CLIENT_MODULE = "debugbar.init"

INFO = "log"
WARN = "warn"
DEPRECATED = "deprecated"


@dataclass(frozen=True)
class LogEntry:
    """One line of the toolbar log. ``message`` is already HTML-escaped."""

    message: str
    kind: str
    caller: str

    def to_dict(self) -> dict:
        return {"msg": self.message, "type": self.kind, "caller": self.caller}


@dataclass
class QueryRecord:
    """Timing sample for one database query."""

    sql: str
    function: str
    is_master: bool
    started_at: Optional[float] = None
    elapsed: Optional[float] = None

    def to_dict(self) -> dict:
        # started_at is internal bookkeeping and never exported
        return {
            "sql": self.sql,
            "function": self.function,
            "master": self.is_master,
            "time": self.elapsed if self.elapsed is not None else 0.0,
        }


class DebugCollector:
    """
    State holder for one request.

    Usage:
        collector = DebugCollector(config)
        collector.enable()

        collector.log("Loaded 3 widgets")
        handle = collector.start_query("SELECT 1", "WidgetStore.load", False)
        # ... run the query ...
        collector.finish_query(handle)

        entries = collector.get_entries()

    Deduplication:
        A warning is dropped when the entry just before it is a deprecation
        notice from the same caller. A deprecation notice is recorded only
        once per function and caller until reset().
    """

    def __init__(
        self,
        config: Optional[DebugConfig] = None,
        resolve_caller: Callable[[int], str] = resolve_caller,
        request_start: Optional[float] = None
    ):
        """
        Initialize the collector.

        Args:
            config: Toolbar settings (defaults to everything off)
            resolve_caller: Callable mapping a stack level to a function label
            request_start: Wall-clock start of the request (defaults to now)
        """
        self.config = config or DebugConfig()
        self.enabled = self.config.enabled
        self.request_start = request_start if request_start is not None else time.time()

        # Warnings raised while the request runs (see capture_warnings());
        # folded into the raw debug buffer before rendering
        self.output = io.StringIO()

        self._resolve_caller = resolve_caller
        self._entries: List[LogEntry] = []
        self._deprecation_keys: Set[str] = set()
        self._raw_lines: List[str] = []
        self._queries: List[QueryRecord] = []

    def enable(self):
        """Turn collection on for the rest of the request."""
        self.enabled = True

    # Entry store

    def log(self, message: str, caller: Optional[str] = None):
        """
        Add an informational line to the log.

        Args:
            message: Plain text, escaped before it is stored
            caller: Label for the origin (defaults to whoever called log())
        """
        if not self.enabled:
            return

        if caller is None:
            caller = self._resolve_caller(DIRECT_CALLER_LEVEL)
        self._entries.append(LogEntry(str(escape(message)), INFO, caller))

    def warn(self, message: str, caller_offset: int = 1):
        """
        Add a warning to the log.

        Args:
            message: Plain text, escaped before it is stored
            caller_offset: How many frames above this method the caller to
                blame sits (1 means whoever called warn())
        """
        if not self.enabled:
            return

        caller = self._resolve_caller(caller_offset + 1)

        # A deprecation notice for the same call site was just logged
        if self._entries:
            last = self._entries[-1]
            if last.kind == DEPRECATED and last.caller == caller:
                return

        self._entries.append(LogEntry(str(escape(message)), WARN, caller))

    def deprecated(
        self,
        function: str,
        version: Optional[str] = None,
        component: Optional[str] = None
    ):
        """
        Add a deprecation notice, with backtrace, to the log.

        Expected to be reached through warn_deprecated(), which is in turn
        called from inside the deprecated function.

        Args:
            function: Name of the deprecated function
            version: Version in which it was deprecated
            component: Application or library that deprecated it
        """
        if not self.enabled:
            return

        caller = self._resolve_caller(DEPRECATION_CALLER_LEVEL)

        key = f"{function}-{caller}"
        if key in self._deprecation_keys:
            return

        version = version or "(unknown version)"
        component = component or "UnknownApp"
        message = escape(f"Use of function {function} was deprecated in {component} {version}")
        message += Markup(
            '<div class="debugbar-backtrace"><span>Backtrace:</span><pre>{}</pre></div>'
        ).format(format_backtrace(skip=2))

        self._deprecation_keys.add(key)
        self._entries.append(LogEntry(str(message), DEPRECATED, caller))

    def get_entries(self) -> Tuple[LogEntry, ...]:
        """Return the log entries in the order they were added."""
        return tuple(self._entries)

    def reset(self):
        """Forget all log entries and deprecation notices already issued."""
        self._entries = []
        self._deprecation_keys = set()

    # Raw debug text

    def capture_raw_line(self, text: str):
        """
        Append a line of free-form debug text.

        Recorded when the collector is enabled or when the debug comment or
        debug log output is switched on in the config.

        Args:
            text: Unescaped text; leading whitespace encodes nesting depth
        """
        if self.enabled or self.config.captures_raw_lines:
            self._raw_lines.append(text.rstrip())

    def get_raw_lines(self) -> Tuple[str, ...]:
        return tuple(self._raw_lines)

    def get_html_debug_log(self) -> str:
        """Render the raw debug buffer as nested HTML, if show_debug is on."""
        if not self.config.show_debug:
            return ""
        return render_html_debug_log(self._raw_lines, timestamps=self.config.debug_timestamps)

    def add_modules(self, page):
        """
        Ask the page to load the client-side panel.

        Args:
            page: Output sink with an ``add_modules(*names)`` method
        """
        if self.enabled:
            page.add_modules(CLIENT_MODULE)

    # Query ledger

    def start_query(self, sql: str, function: str, is_master: bool) -> int:
        """
        Start timing a database query.

        Args:
            sql: Query text
            function: Function issuing the query
            is_master: Whether the query ran against the primary database

        Returns:
            Handle to pass to finish_query(), or -1 when disabled
        """
        if not self.enabled:
            return UNTRACKED_QUERY

        self._queries.append(QueryRecord(
            sql=sql,
            function=function,
            is_master=bool(is_master),
            started_at=time.perf_counter()
        ))
        return len(self._queries) - 1

    def finish_query(self, handle: int):
        """
        Record how long a query took.

        Args:
            handle: Value returned by start_query()
        """
        if handle == UNTRACKED_QUERY or not self.enabled:
            return

        # A second call measures again from start_query()
        record = self._queries[handle]
        record.elapsed = time.perf_counter() - record.started_at

    @contextmanager
    def track_query(self, sql: str, function: str, is_master: bool = False) -> Iterator[int]:
        """
        Time the enclosed block as one query.

        Usage:
            with collector.track_query("SELECT * FROM page", "PageStore.all"):
                rows = cursor.execute(...)
        """
        handle = self.start_query(sql, function, is_master)
        try:
            yield handle
        finally:
            self.finish_query(handle)

    def get_queries(self) -> Tuple[QueryRecord, ...]:
        return tuple(self._queries)


# Request-local collector
_collector_var: ContextVar[DebugCollector] = ContextVar("debugbar_collector")


def create_collector(config: Optional[DebugConfig] = None, **kwargs) -> Tuple[DebugCollector, Token]:
    """
    Bind a fresh collector to the current context.

    Args:
        config: Toolbar settings for the request
        **kwargs: Passed through to DebugCollector

    Returns:
        The collector and a token for dispose_collector()
    """
    collector = DebugCollector(config, **kwargs)
    token = _collector_var.set(collector)
    return collector, token


def get_collector() -> DebugCollector:
    """
    Get the collector bound to the current context.

    Outside a request a new, disabled collector is returned (and not bound),
    so instrumentation calls are harmless no-ops.
    """
    try:
        return _collector_var.get()
    except LookupError:
        return DebugCollector()


def dispose_collector(token: Token):
    """Unbind the collector bound by create_collector()."""
    _collector_var.reset(token)
