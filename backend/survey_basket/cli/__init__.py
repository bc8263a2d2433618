"""Command-line interface registration for the Flask application."""

from __future__ import annotations

from flask import Flask

from .auth import auth_cli, users_cli


def init_app(app: Flask) -> None:
    """Register the ``users`` and ``auth`` command groups on ``app.cli``."""
    app.cli.add_command(users_cli)
    app.cli.add_command(auth_cli)
