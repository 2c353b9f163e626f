"""test_formatters.py - Tests for the debug-data renderer and small formatters.

Covers:
    - Entering/Exiting scopes nest by indentation and dedent normally
    - A stray column-0 line inside a nested trace is flattened and highlighted
    - List markup stays balanced for arbitrary input
    - Timestamp tokens are ignored for indentation and shown again
    - Empty lines, escaping and embedded newlines
    - Debug comment block, size formatting and snapshot summaries
"""

import pytest

from debugbar.toolbar.formatters import (
    DEBUG_LOG_HEADER,
    NBSP,
    format_size,
    format_summary,
    render_debug_comment,
    render_html_debug_log,
)

HIGHLIGHT = '<span style="background:yellow;">'


def _balanced(html: str) -> bool:
    return html.count("<ul") == html.count("</ul>") and html.count("<li>") == html.count("</li>")


# ---------------------------------------------------------------------------
# render_html_debug_log()
# ---------------------------------------------------------------------------


class TestRenderHtmlDebugLog:
    def test_empty_input(self):
        assert render_html_debug_log([]) == DEBUG_LOG_HEADER + "</li>\n</ul>\n"

    def test_single_line(self):
        html = render_html_debug_log(["hello"])
        assert html == DEBUG_LOG_HEADER + "</li><li>\n<tt>hello</tt>\n</li>\n</ul>\n"

    def test_entering_exiting_scenario(self):
        lines = ["Entering foo", "  step one", "  step two", "Exiting foo", "Stray line"]
        html = render_html_debug_log(lines)

        assert html == (
            DEBUG_LOG_HEADER
            + "</li><li>\n<tt>Entering foo</tt>\n"
            + "<ul><li>\n<ul><li>\n<tt>step one</tt>\n"
            + "</li><li>\n<tt>step two</tt>\n"
            + "</li></ul>\n</li></ul>\n</li><li>\n<tt>Exiting foo</tt>\n"
            + "</li><li>\n<tt>Stray line</tt>\n"
            + "</li>\n</ul>\n"
        )
        assert _balanced(html)

    def test_exiting_marker_dedents_without_highlight(self):
        html = render_html_debug_log(["Entering foo", "  step", "Exiting foo"])
        assert HIGHLIGHT not in html
        assert "</li></ul>\n</li></ul>\n</li><li>\n<tt>Exiting foo</tt>" in html

    def test_stray_line_in_nested_trace_is_flattened(self):
        lines = ["Entering foo", "  step one", "Stray line", "  step two", "Exiting foo"]
        html = render_html_debug_log(lines)

        # Stays at depth 2 as a sibling of the steps, highlighted
        assert (
            "<tt>step one</tt>\n</li><li>\n<tt>" + HIGHLIGHT + "Stray line</span></tt>\n"
            "</li><li>\n<tt>step two</tt>\n"
        ) in html
        assert html.count(HIGHLIGHT) == 1
        assert "<tt>Exiting foo</tt>" in html
        assert _balanced(html)

    def test_flattened_line_keeps_depth_for_trailer(self):
        html = render_html_debug_log(["Entering foo", "  step", "Stray"])
        assert html.endswith("</li></ul></li></ul></li>\n</ul>\n")
        assert _balanced(html)

    def test_partial_dedent_closes_difference(self):
        html = render_html_debug_log(["a", "    deep", "  shallower"])
        assert "<tt>deep</tt>\n</li></ul>\n</li></ul>\n</li><li>\n<tt>shallower</tt>" in html
        assert _balanced(html)

    def test_tabs_count_as_indentation(self):
        html = render_html_debug_log(["a", "\tb"])
        assert "<ul><li>\n<tt>b</tt>" in html

    def test_empty_line_renders_nbsp(self):
        html = render_html_debug_log(["a", ""])
        assert f"<tt>{NBSP}</tt>" in html

    def test_text_is_escaped_and_newlines_broken(self):
        html = render_html_debug_log(["<b>x</b> & y\nsecond"])
        assert "<tt>&lt;b&gt;x&lt;/b&gt; &amp; y<br />\nsecond</tt>" in html

    def test_flattened_text_is_escaped(self):
        html = render_html_debug_log(["a", " b", "<i>"])
        assert HIGHLIGHT + "&lt;i&gt;</span>" in html

    @pytest.mark.parametrize("lines", [
        ["   x", "y", " z", "      w", "", "Exiting a"],
        ["Entering a", " Entering b", "  c", " Exiting b", "Exiting a"],
        ["\t\tx", "y\n  z", "   "],
    ])
    def test_markup_is_balanced_for_arbitrary_input(self, lines):
        assert _balanced(render_html_debug_log(lines))


class TestTimestamps:
    LINES = ["0.0100  42.5M  Entering foo", "0.0200  42.5M    step", "0.0300 142.5M    done"]

    def test_timestamp_not_counted_as_indent(self):
        html = render_html_debug_log(self.LINES, timestamps=True)
        assert "<tt>0.0100  42.5M  Entering foo</tt>" in html
        assert "<ul><li>\n<ul><li>\n<tt>0.0200  42.5M  step</tt>" in html
        assert "</li><li>\n<tt>0.0300 142.5M  done</tt>" in html
        assert HIGHLIGHT not in html

    def test_scope_marker_is_matched_with_timestamp_in_front(self):
        # The marker check sees the timestamp, so a stamped "Exiting" line
        # that falls back to column 0 is flattened like any stray line
        lines = self.LINES + ["0.0400  42.5M  Exiting foo"]
        html = render_html_debug_log(lines, timestamps=True)
        assert HIGHLIGHT + "0.0400  42.5M  Exiting foo</span>" in html

    def test_timestamps_ignored_when_disabled(self):
        html = render_html_debug_log(self.LINES, timestamps=False)
        assert "<ul><li>" not in html

    def test_line_without_token_is_left_alone(self):
        html = render_html_debug_log(["no stamp here"], timestamps=True)
        assert "<tt>no stamp here</tt>" in html


# ---------------------------------------------------------------------------
# render_debug_comment()
# ---------------------------------------------------------------------------


class TestRenderDebugComment:
    def test_lines_joined_and_escaped(self):
        comment = render_debug_comment(["first", "a --> b"])
        assert comment == "<!-- Debug output:\nfirst\na --&gt; b\n\n-->"

    def test_empty(self):
        assert render_debug_comment([]) == "<!-- Debug output:\n\n\n-->"


# ---------------------------------------------------------------------------
# format_size() / format_summary()
# ---------------------------------------------------------------------------


class TestFormatSize:
    @pytest.mark.parametrize("size, expected", [
        (0, "0 bytes"),
        (512, "512 bytes"),
        (2048, "2 KB"),
        (int(1.5 * 1024 * 1024), "1.5 MB"),
        (3 * 1024 ** 3, "3.00 GB"),
        (2 * 1024 ** 4, "2.00 TB"),
    ])
    def test_units(self, size, expected):
        assert format_size(size) == expected


class TestFormatSummary:
    def test_disabled_snapshot(self):
        assert format_summary({}) == "debugbar disabled"

    def test_summary_parts(self):
        data = {
            "request": {"method": "GET", "url": "/wiki/Main_Page"},
            "time": 0.0125,
            "log": [
                {"msg": "a", "type": "log", "caller": "x"},
                {"msg": "b", "type": "warn", "caller": "x"},
                {"msg": "c", "type": "deprecated", "caller": "x"},
            ],
            "queries": [{"sql": "SELECT 1", "function": "f", "master": False, "time": 0.002}],
            "memoryPeak": "5.0 MB",
        }
        assert format_summary(data) == (
            "GET /wiki/Main_Page | 12.50ms | 3 log line(s) | 1 query (2.00ms)"
            " | ⚠ 1 warning(s) | ⚠ 1 deprecation(s) | peak 5.0 MB"
        )
