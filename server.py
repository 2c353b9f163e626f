#!/usr/bin/env python3
"""
Demo Flask server showing the debug toolbar on a server-rendered page and
on a JSON API.

    DEBUGBAR_ENABLED=1 DEBUGBAR_SHOW_DEBUG=1 python server.py
"""

import logging
import sqlite3

from dotenv import load_dotenv
from flask import Flask, jsonify, render_template_string, request
from flask_cors import CORS

from debugbar import (
    DebugLogHandler,
    DebugToolbar,
    PrettyLogger,
    debug_scope,
    deprecated,
    enable_debugbar,
    get_collector,
)

# Load environment variables
load_dotenv()

logger = PrettyLogger(filename="server.log")

app = Flask(__name__)

# Enable CORS for API clients (permissive for development)
CORS(app, resources={r"/api/*": {"origins": "*"}})

# Standard logging ends up in the raw debug buffer; warnings go through
# logging unless the toolbar is on, in which case DebugToolbar takes them
logging.getLogger().addHandler(DebugLogHandler())
logging.getLogger().setLevel(logging.DEBUG)
logging.captureWarnings(True)

DebugToolbar(app)

log = logging.getLogger("server")

PAGE_TEMPLATE = """<!doctype html>
<html>
<head><title>{{ title }}</title></head>
<body>
<h1>{{ title }}</h1>
<ul>{% for page in pages %}<li>{{ page }}</li>{% endfor %}</ul>
</body>
</html>
"""

db = sqlite3.connect(":memory:", check_same_thread=False)
db.execute("CREATE TABLE page (title TEXT)")
db.executemany("INSERT INTO page VALUES (?)", [("Main_Page",), ("Sandbox",), ("Help:Contents",)])


def load_pages() -> list:
    """Read all page titles, timing the query on the toolbar."""
    sql = "SELECT title FROM page ORDER BY title"
    with get_collector().track_query(sql, "load_pages", is_master=True):
        rows = db.execute(sql).fetchall()
    log.debug("loaded %d page(s)", len(rows))
    return [row[0] for row in rows]


@deprecated("1.0", "DemoApp")
def page_titles() -> list:
    return load_pages()


@app.before_request
def toolbar_from_query():
    # ?debug=1 turns the toolbar on for a single request
    if request.args.get("debug") == "1":
        enable_debugbar()


@app.route('/', methods=['GET'])
def index():
    """Server-rendered page listing all titles."""
    collector = get_collector()

    with debug_scope("index"):
        log.info("rendering index")
        pages = page_titles()
        collector.log(f"{len(pages)} page(s) listed")
        if not pages:
            collector.warn("no pages in the database")

    return render_template_string(PAGE_TEMPLATE, title="All pages", pages=pages)


@app.route('/api/pages', methods=['GET'])
def api_pages():
    """JSON list of titles; gains a debuginfo member when the toolbar is on."""
    with debug_scope("api_pages"):
        pages = load_pages()

    response_data = {'status': 'ok', 'pages': pages}
    logger.log("RESPONSE", response_data)
    return jsonify(response_data), 200


@app.route('/api/health', methods=['GET'])
def health():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'service': 'debugbar-demo'
    }), 200


if __name__ == '__main__':
    print("Starting Flask server on http://localhost:5050")
    print("Add ?debug=1 to any URL to enable the debug toolbar")
    app.run(host='0.0.0.0', port=5050, debug=True)
