"""Relational refresh token ledger backed by the ``refresh_tokens`` table."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from survey_basket.core.time import as_utc, utcnow
from survey_basket.models.refresh_token import RefreshToken
from survey_basket.services._shared.ports import (
    RefreshTokenLedger,
    RefreshTokenRecord,
    Rotation,
    RotationResult,
    new_refresh_token_value,
)
from survey_basket.uow import SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)


class SqlRefreshTokenLedger(RefreshTokenLedger):
    """
    Refresh token ledger persisted through SQLAlchemy.

    Each public operation runs inside its own unit of work and commits on
    success. Rotation relies on a conditional ``UPDATE`` so that only one of
    several concurrent callers wins the revocation of a given row.

    :param uow_factory: Callable returning a fresh unit of work.
    """

    def __init__(self, uow_factory: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork) -> None:
        self._uow_factory = uow_factory

    @staticmethod
    def _new_row(user_id: int, lifetime: timedelta) -> RefreshToken:
        now = utcnow()
        return RefreshToken(
            user_id=user_id,
            token=new_refresh_token_value(),
            issued_at=now,
            expires_at=now + lifetime,
        )

    def issue_for(self, user_id: int, lifetime: timedelta) -> RefreshTokenRecord:
        with self._uow_factory() as uow:
            row = uow.refresh_tokens.add(self._new_row(user_id, lifetime))
            record = row.to_record()
        return record

    def find_active(self, user_id: int, token: str) -> RefreshTokenRecord | None:
        with self._uow_factory() as uow:
            row = uow.refresh_tokens.get_for_user(user_id, token)
            return row.to_record() if row is not None else None

    def revoke(self, token: str) -> bool:
        with self._uow_factory() as uow:
            row = uow.refresh_tokens.get_by_token(token)
            if row is None:
                return False
            if row.revoked_at is None:
                uow.refresh_tokens.mark_revoked_if_unrevoked(row.id, utcnow())
            return True

    def rotate(self, user_id: int, token: str, lifetime: timedelta) -> Rotation:
        with self._uow_factory() as uow:
            row = uow.refresh_tokens.get_for_user(user_id, token)
            if row is None:
                return Rotation(RotationResult.NOT_FOUND)
            if row.revoked_at is not None:
                return Rotation(RotationResult.REVOKED)
            if row.is_expired:
                return Rotation(RotationResult.EXPIRED)

            if not uow.refresh_tokens.mark_revoked_if_unrevoked(row.id, utcnow()):
                # Another caller revoked the row between our read and write.
                log.info("auth.ledger.rotate_lost_race", extra={"user_id": user_id})
                return Rotation(RotationResult.REVOKED)

            replacement = uow.refresh_tokens.add(self._new_row(user_id, lifetime))
            record = replacement.to_record()
        return Rotation(RotationResult.OK, record)

    def purge_inactive(self, *, older_than: datetime) -> int:
        with self._uow_factory() as uow:
            deleted = uow.refresh_tokens.delete_inactive(as_utc(older_than))
        return deleted
