"""Service layer public API.

Re-exports
----------
- Result primitives (from ``survey_basket.services._shared.result``)
    * :class:`Result`
    * :class:`Error`

- Auth service (from ``survey_basket.services.auth``)
    * :class:`AuthService`, :class:`AuthErrors`
    * DTOs: :class:`LoginIn`, :class:`RefreshIn`, :class:`RevokeIn`,
      :class:`AuthTokensOut`, :class:`AuthTokenConfig`
"""

from __future__ import annotations

from ._shared.result import Error, Result
from .auth import (
    AuthErrors,
    AuthService,
    AuthTokenConfig,
    AuthTokensOut,
    LoginIn,
    RefreshIn,
    RevokeIn,
)

__all__ = [
    # Result
    "Result",
    "Error",
    # Auth
    "AuthService",
    "AuthErrors",
    "AuthTokenConfig",
    "AuthTokensOut",
    "LoginIn",
    "RefreshIn",
    "RevokeIn",
]
