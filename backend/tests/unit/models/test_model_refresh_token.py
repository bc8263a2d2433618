"""Tests for the RefreshToken model and its store-neutral projection."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from freezegun import freeze_time
from sqlalchemy.exc import IntegrityError
from survey_basket.models import RefreshToken
from survey_basket.services._shared.ports import RefreshTokenRecord
from tests.factories.user import RefreshTokenFactory, UserFactory

EXPIRY = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)


def _record(**overrides) -> RefreshTokenRecord:
    fields = {
        "token": "t",
        "user_id": 1,
        "issued_at": EXPIRY - timedelta(days=14),
        "expires_at": EXPIRY,
    }
    fields.update(overrides)
    return RefreshTokenRecord(**fields)


class TestRefreshTokenRecord:
    def test_active_before_expiry(self):
        with freeze_time(EXPIRY - timedelta(microseconds=1)):
            assert _record().is_active

    def test_expiring_exactly_now_is_inactive(self):
        with freeze_time(EXPIRY):
            record = _record()
            assert record.is_expired
            assert not record.is_active

    def test_revoked_is_inactive(self):
        with freeze_time(EXPIRY - timedelta(days=1)):
            record = _record(revoked_at=EXPIRY - timedelta(days=2))
            assert record.is_revoked
            assert not record.is_active

    def test_naive_expiry_is_read_as_utc(self):
        with freeze_time(EXPIRY):
            assert _record(expires_at=EXPIRY.replace(tzinfo=None)).is_expired


class TestRefreshTokenModel:
    def test_defaults_and_projection(self, session):
        row = RefreshTokenFactory()
        record = row.to_record()

        assert record.user_id == row.user_id
        assert record.issued_at.tzinfo is not None
        assert record.revoked_at is None
        assert row.is_active

    def test_boundary_matches_record(self, session):
        row = RefreshTokenFactory(issued_at=EXPIRY - timedelta(days=14), expires_at=EXPIRY)
        with freeze_time(EXPIRY):
            assert row.is_expired
            assert not row.is_active
            assert not row.to_record().is_active

    def test_token_value_is_unique(self, session):
        row = RefreshTokenFactory()
        user = UserFactory()
        session.add(
            RefreshToken(
                user_id=user.id,
                token=row.token,
                issued_at=row.issued_at,
                expires_at=row.expires_at,
            )
        )
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_user_lists_tokens_newest_first(self, session):
        user = UserFactory()
        older = RefreshTokenFactory(user=user, issued_at=EXPIRY - timedelta(days=3))
        newer = RefreshTokenFactory(user=user, issued_at=EXPIRY - timedelta(days=1))
        session.expire_all()

        assert [t.id for t in user.refresh_tokens] == [newer.id, older.id]
