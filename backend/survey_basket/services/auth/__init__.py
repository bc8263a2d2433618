"""Authentication use cases: login, refresh-token rotation and revocation."""

from __future__ import annotations

from .dto import AuthTokenConfig, AuthTokensOut, LoginIn, RefreshIn, RevokeIn
from .errors import AuthErrors
from .service import AuthService

__all__ = [
    "AuthService",
    "AuthErrors",
    "AuthTokenConfig",
    "AuthTokensOut",
    "LoginIn",
    "RefreshIn",
    "RevokeIn",
]
