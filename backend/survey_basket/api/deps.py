"""Shared API helpers for service wiring and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Mapping
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import verify_jwt_in_request

from survey_basket.core.config import ConfigurationError
from survey_basket.core.errors import problem_response
from survey_basket.services._shared.result import Error
from survey_basket.services.auth import AuthErrors, AuthService, AuthTokenConfig

F = TypeVar("F", bound=Callable[..., Any])

#: HTTP status for each auth error code; anything unmapped is a 401.
AUTH_ERROR_STATUS: Mapping[str, int] = {
    AuthErrors.INVALID_CREDENTIALS.code: 401,
    AuthErrors.INVALID_TOKEN.code: 401,
    AuthErrors.REFRESH_TOKEN_INVALID.code: 401,
    AuthErrors.REFRESH_TOKEN_NOT_FOUND.code: 404,
    AuthErrors.USER_NOT_FOUND.code: 404,
}


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def error_response(error: Error, *, status: int | None = None) -> tuple[Response, int]:
    """Render a :class:`Result` failure as a problem+json response.

    ``status`` overrides the default mapping from :data:`AUTH_ERROR_STATUS`.
    """

    resolved = status if status is not None else AUTH_ERROR_STATUS.get(error.code, 401)
    return problem_response(status=resolved, code=error.code, message=error.description)


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


def build_auth_service(app: Any) -> AuthService:
    """Compose :class:`AuthService` from the configured ledger backend."""

    from survey_basket.infra.jwt import JWTTokenSigner
    from survey_basket.infra.sql import SqlRefreshTokenLedger, SqlUserDirectory
    from survey_basket.services._shared.ports import InMemoryRefreshTokenLedger

    backend = app.config["AUTH_LEDGER_BACKEND"]
    if backend == "sql":
        ledger: Any = SqlRefreshTokenLedger()
    elif backend == "redis":
        from survey_basket.core.extensions import get_redis
        from survey_basket.infra.redis import RedisRefreshTokenLedger

        ledger = RedisRefreshTokenLedger(get_redis())
    elif backend == "memory":
        ledger = InMemoryRefreshTokenLedger()
    else:
        raise ConfigurationError(f"Unknown AUTH_LEDGER_BACKEND {backend!r}")

    return AuthService(
        token_signer=JWTTokenSigner(),
        refresh_ledger=ledger,
        users=SqlUserDirectory(),
        token_cfg=AuthTokenConfig(
            access_expires=app.config["JWT_ACCESS_TOKEN_EXPIRES"],
            refresh_expires=app.config["REFRESH_TOKEN_EXPIRES"],
        ),
    )


def get_auth_service() -> AuthService:
    """Return the app-wide :class:`AuthService`, building it on first use."""

    app = current_app._get_current_object()  # type: ignore[attr-defined]
    service = app.extensions.get("auth_service")
    if service is None:
        service = build_auth_service(app)
        app.extensions["auth_service"] = service
    return cast(AuthService, service)
