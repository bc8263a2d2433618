"""Authentication endpoints: login, refresh-token rotation and revocation."""

from __future__ import annotations

from flask import Blueprint, current_app, request
from flask_jwt_extended import get_jwt_identity

from survey_basket.api.deps import (
    error_response,
    get_auth_service,
    json_response,
    require_auth,
    timing,
)
from survey_basket.core.extensions import limiter
from survey_basket.schemas import AuthResponseSchema, LoginSchema, RefreshSchema, RevokeSchema
from survey_basket.services.auth import AuthErrors, LoginIn, RefreshIn, RevokeIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

login_schema = LoginSchema()
refresh_schema = RefreshSchema()
revoke_schema = RevokeSchema()
auth_response_schema = AuthResponseSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and issue an access/refresh token pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    result = get_auth_service().login(LoginIn(email=data["email"], password=data["password"]))
    if result.is_failure:
        return error_response(result.error)
    return json_response(auth_response_schema.dump(result.value))


@bp.post("/refresh")
@timing
def refresh():
    """Exchange a (possibly expired) access token and a refresh token for a new pair."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    result = get_auth_service().refresh(
        RefreshIn(access_token=data["access_token"], refresh_token=data["refresh_token"])
    )
    if result.is_failure:
        # Every refresh failure is an authentication failure for the client.
        return error_response(result.error, status=401)
    return json_response(auth_response_schema.dump(result.value))


@bp.post("/revoke")
@require_auth
@timing
def revoke():
    """Revoke one of the caller's refresh tokens (logout)."""

    data = revoke_schema.load(request.get_json(silent=True) or {})
    try:
        user_id = int(get_jwt_identity())
    except (TypeError, ValueError):
        return error_response(AuthErrors.INVALID_TOKEN)

    result = get_auth_service().revoke(RevokeIn(user_id=user_id, refresh_token=data["refresh_token"]))
    if result.is_failure:
        return error_response(result.error)
    return "", 204
