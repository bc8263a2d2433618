"""Catalog of authentication failures returned inside :class:`Result` objects."""

from __future__ import annotations

from typing import Final

from survey_basket.services._shared.result import Error


class AuthErrors:
    """Named, immutable errors consumed by :class:`AuthService` callers."""

    INVALID_CREDENTIALS: Final = Error("User.InvalidCredentials", "Invalid email/password")

    USER_NOT_FOUND: Final = Error("User.NotFound", "User was not found in the system.")

    REFRESH_TOKEN_NOT_FOUND: Final = Error(
        "User.RefreshTokenNotFound", "Refresh token not found or expired"
    )

    INVALID_TOKEN: Final = Error("User.InvalidToken", "Token is invalid or expired")

    REFRESH_TOKEN_INVALID: Final = Error(
        "Auth.RefreshToken.Invalid",
        "The provided refresh token is invalid or inactive.",
    )
