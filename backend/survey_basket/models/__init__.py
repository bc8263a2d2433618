"""SQLAlchemy models registered on the shared metadata."""

from __future__ import annotations

from .refresh_token import RefreshToken
from .user import User

__all__ = ["User", "RefreshToken"]
