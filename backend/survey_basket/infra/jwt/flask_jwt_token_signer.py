# survey_basket/infra/jwt/flask_jwt_token_signer.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from survey_basket.services._shared.ports import TokenSigner
from survey_basket.services._shared.result import Result
from survey_basket.services.auth.errors import AuthErrors

log = logging.getLogger(__name__)

# Flask-JWT-Extended marks every token with a "type" claim.
ACCESS_TOKEN_TYPE = "access"


@dataclass(slots=True)
class JWTTokenSigner(TokenSigner):
    """
    Adapter for Flask-JWT-Extended.

    Signing key, algorithm, issuer and audience come from the Flask config
    (``JWT_SECRET_KEY``, ``JWT_ENCODE_ISSUER``/``JWT_DECODE_ISSUER``,
    ``JWT_ENCODE_AUDIENCE``/``JWT_DECODE_AUDIENCE``).

    .. note::
       Requires an active Flask app context.
    """

    def issue(
        self,
        subject: str,
        *,
        lifetime: timedelta,
        claims: Mapping[str, Any] | None = None,
    ) -> str:
        # Flask-JWT-Extended adds jti (uuid4), iat, nbf, exp, iss and aud.
        return cast(
            str,
            create_access_token(
                identity=subject,
                additional_claims=dict(claims or {}),
                expires_delta=lifetime,
            ),
        )

    def validate(self, token: str, *, ignore_expiry: bool = False) -> Result[dict[str, Any]]:
        try:
            decoded = cast(dict[str, Any], decode_token(token, allow_expired=ignore_expiry))
        except (PyJWTError, JWTExtendedException) as exc:
            log.info("jwt.validate.rejected reason=%s", type(exc).__name__)
            return Result.failure(AuthErrors.INVALID_TOKEN)

        if decoded.get("type") != ACCESS_TOKEN_TYPE or not decoded.get("sub"):
            return Result.failure(AuthErrors.INVALID_TOKEN)
        return Result.success(decoded)
