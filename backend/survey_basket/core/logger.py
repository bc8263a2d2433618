"""JSON logging on stdout with per-request correlation ids."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
# Inbound headers honoured as the correlation id, in priority order.
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")
# Whitelisted ``extra=`` attributes; anything else stays out of the log line.
EXTRA_KEYS = ("endpoint", "elapsed_ms", "method", "path", "status", "user_id")

access_log = logging.getLogger("survey_basket.access")


class JSONFormatter(logging.Formatter):
    """One JSON object per record: time, level, logger, message, request id and extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update({key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` on every record (``None`` outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def ensure_request_id() -> str:
    """
    Return the correlation id of the current request.

    Reuses an inbound ``X-Request-ID``/``X-Correlation-ID`` when present,
    otherwise mints a UUID4 and caches it on :data:`flask.g`. Outside a
    request a throwaway id is returned.
    """
    if not has_request_context():
        return str(uuid4())
    cached = g.get("request_id")
    if cached:
        return str(cached)
    inbound = next((request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)), None)
    g.request_id = inbound or str(uuid4())
    return str(g.request_id)


def configure_logging(level: str | int = "INFO") -> None:
    """Route the root logger to stdout as JSON at ``level``."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Seed the request id, echo it back as a header and emit one access line per request."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _access_log(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        access_log.info(
            "request.completed",
            extra={"method": request.method, "path": request.path, "status": response.status_code},
        )
        return response


__all__ = ["JSONFormatter", "configure_logging", "ensure_request_id", "init_app"]
