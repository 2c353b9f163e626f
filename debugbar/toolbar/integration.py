"""
Flask integration.

Gives every request its own DebugCollector and renders the collected data
into the response: HTML pages get the inline panel (and, if configured, the
debug comment and "Debug data" list) before ``</body>``, JSON API responses
get a ``debuginfo`` member.

Usage:
    from flask import Flask
    from debugbar import DebugToolbar

    app = Flask(__name__)
    app.config["DEBUGBAR_ENABLED"] = True
    DebugToolbar(app)
"""

import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

from flask import Flask, Response, current_app, g, request, url_for

from ..core.config import DebugConfig, load_config
from ..core.logger import PrettyLogger
from .collector import create_collector, dispose_collector, get_collector
from .formatters import format_summary
from .gitinfo import GitInfo
from .handler import capture_warnings
from .result import ApiResult
from .snapshot import Environment, capture_buffered_output, export_to_api_result, render_inline_panel

EXTENSION_NAME = "debugbar"


class HtmlPage:
    """
    Collects the client modules and inline scripts added to one HTML page.

    Args:
        module_url: Maps a module name to the URL of its script
    """

    def __init__(self, module_url: Callable[[str], str]):
        self.module_url = module_url
        self.modules: List[str] = []
        self.inline_scripts: List[str] = []

    def add_modules(self, *names: str):
        for name in names:
            if name not in self.modules:
                self.modules.append(name)

    def add_inline_script(self, html: str):
        if html:
            self.inline_scripts.append(html)

    def render(self) -> str:
        tags = [f'<script src="{self.module_url(name)}"></script>' for name in self.modules]
        return "\n".join(tags + self.inline_scripts)


class FlaskEnvironment(Environment):
    """Environment facts read from the active Flask request."""

    def request_info(self) -> Dict:
        query = request.query_string.decode("utf-8", "replace")
        return {
            "method": request.method,
            "url": request.path + (f"?{query}" if query else ""),
            "headers": dict(request.headers),
            "params": request.values.to_dict(),
        }


def _module_url(name: str) -> str:
    return url_for("static", filename=f"js/{name}.js")


def _inject_before_body_end(body: str, html: str) -> str:
    index = body.lower().rfind("</body>")
    if index == -1:
        return body + html
    return body[:index] + html + body[index:]


class DebugToolbar:
    """
    Flask extension binding a DebugCollector to each request.

    Settings are read from the environment (and ``.env``), then overridden
    by ``DEBUGBAR_*`` keys in ``app.config``.
    """

    def __init__(self, app: Optional[Flask] = None, config: Optional[DebugConfig] = None):
        self.base_config = config
        self.config = config or DebugConfig()
        self.env: Optional[FlaskEnvironment] = None
        self.logger: Optional[PrettyLogger] = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask):
        base = self.base_config or load_config()
        self.config = base.overlay(app.config)
        self.env = FlaskEnvironment(
            app_version=self.config.app_version,
            git=GitInfo(app.root_path, self.config.git_view_url)
        )
        if self.config.log_file:
            log_path = Path(self.config.log_file)
            self.logger = PrettyLogger(log_dir=str(log_path.parent), filename=log_path.name)

        capture_warnings(True)

        app.extensions[EXTENSION_NAME] = self
        app.before_request(self._before_request)
        app.after_request(self._after_request)
        app.teardown_request(self._teardown_request)

    def _before_request(self):
        _, token = create_collector(self.config, request_start=time.time())
        g._debugbar_token = token

    def _after_request(self, response: Response) -> Response:
        collector = get_collector()

        if self.logger and collector.enabled:
            self.logger.log("REQUEST_SUMMARY", {
                "summary": format_summary(self._summary_data(collector)),
                "status": response.status_code,
            })

        if response.direct_passthrough:
            return response

        if response.mimetype == "text/html":
            if collector.enabled:
                capture_buffered_output(collector)
            page = HtmlPage(_module_url)
            collector.add_modules(page)
            page.add_inline_script(render_inline_panel(collector, self.env))
            html = collector.get_html_debug_log() + page.render()
            if html:
                body = response.get_data(as_text=True)
                response.set_data(_inject_before_body_end(body, html))
        elif response.is_json and collector.enabled:
            data = response.get_json(silent=True)
            if isinstance(data, dict):
                result = ApiResult()
                result.data = data
                export_to_api_result(collector, self.env, result)
                response.set_data(current_app.json.dumps(result.to_dict(), default=str))

        return response

    def _teardown_request(self, exc: Optional[BaseException] = None):
        token = g.pop("_debugbar_token", None)
        if token is not None:
            dispose_collector(token)

    def _summary_data(self, collector) -> Dict:
        return {
            "request": self.env.request_info(),
            "time": time.time() - collector.request_start,
            "log": [entry.to_dict() for entry in collector.get_entries()],
            "queries": [query.to_dict() for query in collector.get_queries()],
        }


def enable_debugbar():
    """Turn the toolbar on for the current request only."""
    get_collector().enable()
