"""RFC 7807 problem+json rendering for every error leaving the API."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Final

from flask import Flask, Response, has_request_context, jsonify, request
from flask_limiter.errors import RateLimitExceeded
from marshmallow import ValidationError
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

from survey_basket.core.logger import ensure_request_id
from survey_basket.services._shared.errors import ServiceError

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE: Final[str] = "application/problem+json"

#: Stable ``code`` for transport-level failures (auth failures carry their own).
STATUS_CODES: Final[dict[int, str]] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    415: "unsupported_media_type",
    422: "validation_error",
    429: "too_many_requests",
    500: "internal_server_error",
    503: "service_unavailable",
}


def code_for_status(status: int) -> str:
    return STATUS_CODES.get(status, "error")


def build_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build the problem body.

    ``title`` is the HTTP reason phrase, ``detail`` the client-safe message
    and ``code`` the machine-readable identifier (e.g.
    ``Auth.RefreshToken.Invalid``). ``request_id`` matches the
    ``X-Request-ID`` response header.

    :param status: HTTP status code.
    :param code: Stable error code.
    :param message: Human-readable description, never internal detail.
    :param details: Optional structured, client-safe details.
    :returns: Problem+JSON dictionary.
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": message,
        "instance": request.path if has_request_context() else None,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        problem["details"] = details
    return problem


def problem_response(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> tuple[Response, int]:
    """Return a ``(response, status)`` pair with a problem+json body."""
    resp = jsonify(build_problem(status=status, code=code, message=message, details=details))
    resp.mimetype = PROBLEM_MIMETYPE
    return resp, status


def init_app(app: Flask) -> None:
    """
    Register the problem+json error handlers.

    4xx outcomes are logged as warnings without traceback; 5xx ones as
    errors with ``exc_info``. Unexpected exceptions never expose their
    message to the client.
    """

    @app.errorhandler(RateLimitExceeded)
    def handle_rate_limited(err: RateLimitExceeded):
        log.warning("http.rate_limited limit=%s", err.description)
        return problem_response(
            status=429,
            code=code_for_status(429),
            message=f"Rate limit exceeded: {err.description}",
        )

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or HTTPStatus(status).phrase).strip()
        (log.error if status >= 500 else log.warning)("http.error status=%s", status)
        return problem_response(status=status, code=code_for_status(status), message=message)

    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        log.warning("http.validation_failed")
        return problem_response(
            status=422,
            code=code_for_status(422),
            message="Validation failed",
            details={"errors": err.messages},
        )

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        # Transient DB connectivity, lock timeouts, ...
        log.error("db.unavailable", exc_info=True)
        return problem_response(
            status=503,
            code=code_for_status(503),
            message="Service temporarily unavailable",
        )

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        log.error("service.contract_violation kind=%s", type(err).__name__, exc_info=True)
        return problem_response(status=500, code=code_for_status(500), message="Unexpected error")

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        log.error("unhandled.exception kind=%s", type(err).__name__, exc_info=True)
        return problem_response(status=500, code=code_for_status(500), message="Unexpected error")
