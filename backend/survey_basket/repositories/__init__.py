"""Persistence-only repositories bound to the Flask-scoped SQLAlchemy session."""

from __future__ import annotations

from .base import BaseRepository
from .refresh_token import RefreshTokenRepository
from .user import UserRepository

__all__ = ["BaseRepository", "UserRepository", "RefreshTokenRepository"]
