"""Refresh token rows owned by a user (multi-device sessions)."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from survey_basket.core.extensions import db
from survey_basket.core.time import as_utc, utcnow
from survey_basket.services._shared.ports import RefreshTokenRecord

from .base import PKMixin, ReprMixin

if TYPE_CHECKING:
    from .user import User


class RefreshToken(PKMixin, ReprMixin, db.Model):
    """
    Opaque refresh token issued on login or rotation.

    Rows are only mutated by revocation (``revoked_at``) and are never
    deleted by the auth flow itself; inactive rows are simply not honored.

    Fields
    ------
    user_id : int
        Owner, cascade-deleted with the user.
    token : str
        Random URL-safe value, unique across the table.
    issued_at : datetime
        Creation instant (UTC).
    expires_at : datetime
        Absolute expiration (UTC).
    revoked_at : datetime | None
        Set once on explicit revocation or rotation.
    """

    __tablename__ = "refresh_tokens"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    token: Mapped[str] = mapped_column(String(128), nullable=False)
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship(back_populates="refresh_tokens")

    __table_args__ = (
        UniqueConstraint("token", name="uq_refresh_tokens_token"),
        Index("ix_refresh_tokens_user_id", "user_id"),
    )

    @property
    def is_expired(self) -> bool:
        return utcnow() >= as_utc(self.expires_at)

    @property
    def is_active(self) -> bool:
        return self.revoked_at is None and not self.is_expired

    def to_record(self) -> RefreshTokenRecord:
        """Project the row onto the store-neutral :class:`RefreshTokenRecord`."""
        return RefreshTokenRecord(
            token=self.token,
            user_id=self.user_id,
            issued_at=as_utc(self.issued_at),
            expires_at=as_utc(self.expires_at),
            revoked_at=as_utc(self.revoked_at) if self.revoked_at else None,
        )
