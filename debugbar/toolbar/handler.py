"""
Bridge from standard logging to the raw debug buffer.

DebugLogHandler copies every log record it receives into the current
request's raw debug buffer, indented by the depth of the enclosing
debug_scope() blocks, which write "Entering <name>" / "Exiting <name>"
markers around their body. The indentation drives the nested "Debug data"
list rendered by render_html_debug_log().

capture_warnings() sends warnings raised during an enabled request to the
collector's output buffer instead of stderr.

Typical usage:
    import logging
    from debugbar import DebugLogHandler, debug_scope

    logging.getLogger().addHandler(DebugLogHandler())
    logging.captureWarnings(True)

    with debug_scope("PageView.render"):
        logger.info("parsed 12 templates")
"""

import logging
import time
import warnings
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

import psutil

from .collector import DebugCollector, get_collector

# One character of indentation per nesting level
INDENT = " "

_depth: ContextVar[int] = ContextVar("debugbar_depth", default=0)

_previous_showwarning = None


def _format_line(collector: DebugCollector, text: str) -> str:
    line = INDENT * _depth.get() + text
    if collector.config.debug_timestamps:
        elapsed = time.time() - collector.request_start
        memory_mb = psutil.Process().memory_info().rss / (1024 * 1024)
        line = f"{elapsed:.4f} {memory_mb:5.1f}M  {line}"
    return line


def debug_line(text: str):
    """Write one line to the current request's raw debug buffer."""
    collector = get_collector()
    collector.capture_raw_line(_format_line(collector, text))


@contextmanager
def debug_scope(name: str) -> Iterator[None]:
    """
    Mark a nested section in the raw debug buffer.

    Lines written inside the block are indented one level deeper than the
    surrounding ones.

    Args:
        name: Label for the section, usually the function name
    """
    debug_line(f"Entering {name}")
    token = _depth.set(_depth.get() + 1)
    try:
        yield
    finally:
        _depth.reset(token)
        debug_line(f"Exiting {name}")


class DebugLogHandler(logging.Handler):
    """
    A logging.Handler that feeds the raw debug buffer.

    Records are formatted with the handler's formatter (by default
    "[LEVEL] name: message") and captured only when the current collector
    accepts raw lines, so the handler can stay attached permanently.
    """

    def __init__(self, level: int = logging.NOTSET):
        super().__init__(level)
        self.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))

    def emit(self, record: logging.LogRecord):
        try:
            for text in self.format(record).splitlines() or [""]:
                debug_line(text)
        except Exception:
            # A bug in the toolbar must never silence the application's logs
            self.handleError(record)


def _showwarning(message, category, filename, lineno, file=None, line=None):
    collector = get_collector()
    if file is None and collector.enabled:
        collector.output.write(warnings.formatwarning(message, category, filename, lineno, line))
    else:
        _previous_showwarning(message, category, filename, lineno, file, line)


def capture_warnings(capture: bool):
    """
    Route warnings raised during an enabled request into its output buffer.

    Works like logging.captureWarnings(): outside a request, or while the
    toolbar is off, warnings go to whatever handler was installed before.
    The buffer is folded into the debug log when the response is rendered.

    Args:
        capture: True to install the hook, False to restore the previous one
    """
    global _previous_showwarning
    if capture:
        if warnings.showwarning is not _showwarning:
            _previous_showwarning = warnings.showwarning
            warnings.showwarning = _showwarning
    elif _previous_showwarning is not None:
        warnings.showwarning = _previous_showwarning
        _previous_showwarning = None
