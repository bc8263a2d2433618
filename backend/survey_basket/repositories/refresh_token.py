"""Refresh token repository: lookups and the compare-and-set revocation."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, or_, select, update

from survey_basket.models.refresh_token import RefreshToken
from survey_basket.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken` rows."""

    model = RefreshToken

    def get_by_token(self, token: str) -> RefreshToken | None:
        """Fetch a row by its unique token value."""
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def get_for_user(self, user_id: int, token: str) -> RefreshToken | None:
        """Fetch a row by token value, restricted to the owner ``user_id``."""
        stmt = select(RefreshToken).where(
            RefreshToken.user_id == user_id,
            RefreshToken.token == token,
        )
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def mark_revoked_if_unrevoked(self, token_id: int, revoked_at: datetime) -> bool:
        """
        Set ``revoked_at`` only while it is still ``NULL``.

        A single conditional ``UPDATE`` acts as compare-and-set: of two
        concurrent callers exactly one sees ``rowcount == 1``.

        :returns: ``True`` if this call performed the revocation.
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == token_id, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=revoked_at)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return bool(result.rowcount == 1)

    def delete_inactive(self, older_than: datetime) -> int:
        """Delete rows expired or revoked before ``older_than``. :returns: Row count."""
        stmt = (
            delete(RefreshToken)
            .where(
                or_(
                    RefreshToken.expires_at <= older_than,
                    RefreshToken.revoked_at <= older_than,
                )
            )
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return int(result.rowcount or 0)
