"""WSGI-level HTTP plumbing: proxy headers and CORS for the auth API."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

# Headers browsers may send to and read from the API
ALLOWED_HEADERS = ("Authorization", "Content-Type", "X-Request-ID")
EXPOSED_HEADERS = ("X-Request-ID", "X-Response-Time-ms")


def init_app(app: Flask) -> None:
    """Apply ``ProxyFix`` (unless ``USE_PROXYFIX`` is off) and CORS.

    ``CORS_ORIGINS`` is a comma-separated allow-list. Blank or ``"*"`` allows
    any origin. Credentials are never allowed: the API authenticates with
    bearer tokens, not cookies.
    """
    if app.config.get("USE_PROXYFIX", True):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    raw_origins = app.config.get("CORS_ORIGINS", "")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if not origins or origins == ["*"] else origins}},
        allow_headers=list(ALLOWED_HEADERS),
        expose_headers=list(EXPOSED_HEADERS),
        supports_credentials=False,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
