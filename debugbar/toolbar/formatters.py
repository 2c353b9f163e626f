"""
Output formatters for collected debug data.

Turns the raw debug buffer into the nested "Debug data" HTML list or an
HTML comment, and formats sizes and one-line summaries of a snapshot.
"""

import re
from typing import Dict, List, Sequence

from markupsafe import escape

# "<seconds>.<fraction> <memory>.<decimal>M  " as written by timestamped
# debug output
TIMESTAMP_PATTERN = re.compile(r"^(\d+\.\d+ {1,3}\d+(?:.\dM)?\s{2})")

# Lines that legitimately close a nested scope
SCOPE_PREFIXES = ("Entering ", "Exiting ")

NBSP = "\xa0"

DEBUG_LOG_HEADER = '\n<hr />\n<strong>Debug data:</strong><ul id="debugbar-html">\n<li>'

SIZE_UNITS = ["bytes", "KB", "MB", "GB", "TB"]


def _escape_lines(text: str) -> str:
    """Escape text and turn newlines into <br /> breaks."""
    return str(escape(text)).replace("\n", "<br />\n")


def _close_levels(open_levels: List[int], count: int) -> str:
    del open_levels[len(open_levels) - count:]
    return "</li></ul>\n" * count + "</li><li>\n"


def _next_item() -> str:
    return "</li><li>\n"


def _open_levels(open_levels: List[int], count: int) -> str:
    start = len(open_levels)
    open_levels.extend(range(start + 1, start + count + 1))
    return "<ul><li>\n" * count


def render_html_debug_log(lines: Sequence[str], timestamps: bool = False) -> str:
    """
    Render raw debug lines as a nested HTML list.

    Each run of leading whitespace is one nesting level per character, so a
    line indented by two spaces more than its predecessor opens two nested
    lists. A line that falls back to column 0 without being an
    "Entering ..." / "Exiting ..." scope marker stays at the current depth
    and is highlighted, since it interrupts an otherwise nested trace.

    Args:
        lines: Raw debug lines in the order they were captured
        timestamps: Whether lines start with a timestamp token that must not
            count towards the indentation

    Returns:
        HTML fragment
    """
    parts = [DEBUG_LOG_HEADER]
    # One entry per currently open nested <ul>
    open_levels: List[int] = []

    for line in lines:
        prefix = ""
        if timestamps:
            match = TIMESTAMP_PATTERN.match(line)
            if match:
                prefix = match.group(1)
                line = line[len(prefix):]

        display = line.lstrip()
        indent = len(line) - len(display)
        diff = indent - len(open_levels)

        display = prefix + display
        if display == "":
            display = NBSP

        if indent == 0 and diff < 0 and not display.startswith(SCOPE_PREFIXES):
            diff = 0
            display = '<span style="background:yellow;">' + _escape_lines(display) + "</span>"
        else:
            display = _escape_lines(display)

        if diff < 0:
            parts.append(_close_levels(open_levels, -diff))
        elif diff == 0:
            parts.append(_next_item())
        else:
            parts.append(_open_levels(open_levels, diff))

        parts.append(f"<tt>{display}</tt>\n")

    parts.append("</li></ul>" * len(open_levels) + "</li>\n</ul>\n")
    return "".join(parts)


def render_debug_comment(lines: Sequence[str]) -> str:
    """
    Render raw debug lines as an HTML comment.

    Args:
        lines: Raw debug lines

    Returns:
        ``<!-- Debug output: ... -->`` block with the lines escaped
    """
    return "<!-- Debug output:\n" + str(escape("\n".join(lines))) + "\n\n-->"


def format_size(size: float) -> str:
    """
    Format a byte count for display.

    Args:
        size: Size in bytes

    Returns:
        e.g. "512 bytes", "3 KB", "1.4 MB", "2.05 GB"
    """
    index = 0
    while size >= 1024 and index < len(SIZE_UNITS) - 1:
        size /= 1024
        index += 1

    if index == 0:
        return f"{int(size)} bytes"
    if index == 1:
        return f"{round(size)} KB"
    if index == 2:
        return f"{size:.1f} MB"
    return f"{size:.2f} {SIZE_UNITS[index]}"


def format_summary(data: Dict) -> str:
    """
    Format a brief summary of a snapshot.

    Useful for logs or quick inspection.

    Args:
        data: Snapshot dictionary from build_snapshot()

    Returns:
        Summary string
    """
    if not data:
        return "debugbar disabled"

    request = data.get("request", {})
    parts = [f"{request.get('method', '?')} {request.get('url', '?')}"]

    if data.get("time") is not None:
        parts.append(f"{data['time'] * 1000:.2f}ms")

    log = data.get("log", [])
    parts.append(f"{len(log)} log line(s)")

    queries = data.get("queries", [])
    if queries:
        total = sum(query["time"] for query in queries)
        parts.append(f"{len(queries)} quer{'y' if len(queries) == 1 else 'ies'} ({total * 1000:.2f}ms)")

    warnings = sum(1 for entry in log if entry["type"] == "warn")
    if warnings:
        parts.append(f"⚠ {warnings} warning(s)")

    deprecations = sum(1 for entry in log if entry["type"] == "deprecated")
    if deprecations:
        parts.append(f"⚠ {deprecations} deprecation(s)")

    if data.get("memoryPeak"):
        parts.append(f"peak {data['memoryPeak']}")

    return " | ".join(parts)
