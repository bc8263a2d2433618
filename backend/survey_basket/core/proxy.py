"""WSGI proxy middleware configuration helper."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Trust one hop of ``X-Forwarded-*`` headers when ``USE_PROXYFIX`` is set.

    The login rate limiter keys on the remote address, so behind a reverse
    proxy the forwarded client address must replace the proxy's own.
    """
    if app.config.get("USE_PROXYFIX", True):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)  # type: ignore[method-assign]
