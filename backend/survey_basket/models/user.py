"""User model definition for the survey backend."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from werkzeug.security import check_password_hash, generate_password_hash

from survey_basket.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .refresh_token import RefreshToken


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    password_hash : str
        Hashed password (write-only setter via ``password``).
    first_name : str
        Display attribute.
    last_name : str
        Display attribute.
    refresh_tokens : list[RefreshToken]
        Owned refresh tokens; deleted together with the user.
    """

    __tablename__ = "users"

    # Columns
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    refresh_tokens: Mapped[list[RefreshToken]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="RefreshToken.issued_at.desc()",
    )

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("ix_users_email", "email"),
    )

    # -------------------- Credentials --------------------
    @property
    def password(self) -> Any:
        raise AttributeError("User.password is write-only; use verify_password().")

    @password.setter
    def password(self, raw: str) -> None:
        """Store a salted werkzeug hash of ``raw`` (never the plain text)."""
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """Constant-time comparison of ``raw`` against :attr:`password_hash`."""
        return bool(self.password_hash) and check_password_hash(self.password_hash, raw)

    # -------------------- Normalization --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """Lowercase and trim ``email``; the API layer does the full format check."""
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Email is required.")
        normalized = value.strip().lower()
        local, _, domain = normalized.partition("@")
        if not local or "." not in domain:
            raise ValueError(f"Email {normalized!r} looks malformed.")
        return normalized
