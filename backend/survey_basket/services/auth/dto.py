# survey_basket/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """Credentials as submitted; ``email`` is normalized by the user directory."""

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Rotation request.

    :ivar access_token: Last access JWT, expired or not; identifies the user.
    :ivar refresh_token: Opaque value being exchanged (single use).
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class RevokeIn:
    """Logout request; ``user_id`` comes from the verified bearer token."""

    user_id: int
    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokensOut:
    """
    Token pair returned by login and refresh, with the owner's display data.

    :ivar expires_in: Access token lifetime in seconds.
    :ivar refresh_token_expiration: Absolute refresh expiry (aware, UTC).
    """

    user_id: int
    email: str
    first_name: str
    last_name: str
    access_token: str
    expires_in: int
    refresh_token: str
    refresh_token_expiration: datetime


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """Lifetimes derived from ``JWT_ACCESS_TOKEN_MINUTES`` and ``REFRESH_TOKEN_DAYS``."""

    access_expires: timedelta
    refresh_expires: timedelta
