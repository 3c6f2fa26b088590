"""Command-line interface registration for the Flask application."""

from __future__ import annotations

from flask import Flask

from .auth import auth_cli
from .credentials import credentials_cli


def init_app(app: Flask) -> None:
    """Register the ``credentials`` and ``auth`` command groups.

    Parameters
    ----------
    app:
        Flask application instance whose CLI registry receives the groups.
    """
    app.cli.add_command(credentials_cli)
    app.cli.add_command(auth_cli)
