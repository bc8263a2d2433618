# tests/unit/infra/test_sql_refresh_token_ledger.py
from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest
from freezegun import freeze_time
from sqlalchemy import func, select
from survey_basket.core.config import TestingConfig
from survey_basket.core.extensions import db
from survey_basket.core.time import utcnow
from survey_basket.factory import create_app
from survey_basket.infra.sql import SqlRefreshTokenLedger
from survey_basket.models import RefreshToken, User
from survey_basket.services._shared.ports import RotationResult
from survey_basket.uow import SQLAlchemyUnitOfWork
from tests.factories.user import RefreshTokenFactory, UserFactory

LIFETIME = timedelta(days=14)


@pytest.fixture()
def ledger(session):
    return SqlRefreshTokenLedger()


@pytest.fixture()
def user(session):
    return UserFactory()


def _count(session) -> int:
    return session.execute(select(func.count(RefreshToken.id))).scalar_one()


def test_issue_persists_row(ledger, user, session):
    record = ledger.issue_for(user.id, LIFETIME)

    row = session.execute(select(RefreshToken).where(RefreshToken.token == record.token)).scalar_one()
    assert row.user_id == user.id
    assert row.revoked_at is None
    assert record.is_active
    assert record.expires_at.tzinfo is not None


def test_find_active_returns_inactive_records_too(ledger, user):
    record = ledger.issue_for(user.id, LIFETIME)
    ledger.revoke(record.token)

    found = ledger.find_active(user.id, record.token)

    assert found is not None
    assert found.is_revoked
    assert not found.is_active


def test_find_active_is_scoped_to_user(ledger, user):
    other = UserFactory()
    record = ledger.issue_for(user.id, LIFETIME)

    assert ledger.find_active(other.id, record.token) is None


def test_rotate_commits_revocation_and_replacement(ledger, user, session):
    record = ledger.issue_for(user.id, LIFETIME)

    rotation = ledger.rotate(user.id, record.token, LIFETIME)

    assert rotation.status is RotationResult.OK
    assert _count(session) == 2
    assert ledger.find_active(user.id, record.token).is_revoked
    assert ledger.find_active(user.id, rotation.replacement.token).is_active


def test_second_rotation_of_same_token_loses(ledger, user, session):
    record = ledger.issue_for(user.id, LIFETIME)

    first = ledger.rotate(user.id, record.token, LIFETIME)
    second = ledger.rotate(user.id, record.token, LIFETIME)

    assert first.status is RotationResult.OK
    assert second.status is RotationResult.REVOKED
    assert second.replacement is None
    assert _count(session) == 2


def test_rotate_of_expired_row(ledger, user):
    with freeze_time("2026-01-01 00:00:00"):
        record = ledger.issue_for(user.id, timedelta(days=14))
    with freeze_time("2026-01-15 00:00:00"):
        rotation = ledger.rotate(user.id, record.token, LIFETIME)

    assert rotation.status is RotationResult.EXPIRED


def test_revoke_unknown_token(ledger, session):
    assert ledger.revoke("missing") is False


def test_purge_inactive_deletes_only_old_inactive_rows(ledger, user, session):
    now = utcnow()
    expired = RefreshTokenFactory(user=user, issued_at=now - timedelta(days=30), expires_at=now - timedelta(days=16))
    revoked = RefreshTokenFactory(
        user=user,
        issued_at=now - timedelta(days=20),
        revoked_at=now - timedelta(days=10),
    )
    keep = RefreshTokenFactory(user=user)
    user_id, gone, kept = user.id, (expired.token, revoked.token), keep.token

    deleted = ledger.purge_inactive(older_than=now - timedelta(days=7))

    assert deleted == 2
    assert _count(session) == 1
    assert ledger.find_active(user_id, kept) is not None
    assert all(ledger.find_active(user_id, token) is None for token in gone)


def test_rows_cascade_with_their_user(ledger, user, session):
    ledger.issue_for(user.id, LIFETIME)
    session.delete(session.get(type(user), user.id))
    session.commit()

    assert _count(session) == 0


# ------------------------- Concurrent rotation ---------------------------- #
@pytest.fixture()
def file_app(tmp_path):
    """App on a file-backed SQLite database so worker threads get their own connections."""

    class FileDatabaseConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'ledger.db'}"

    app = create_app(FileDatabaseConfig, instance_relative_config=False)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()
        db.engine.dispose()


def test_concurrent_rotations_of_one_token_have_a_single_winner(file_app):
    workers = 4
    barrier = threading.Barrier(workers)
    updates: list[bool] = []

    def uow_after_shared_read() -> SQLAlchemyUnitOfWork:
        # Every worker reads the still-active row before any of them writes.
        uow = SQLAlchemyUnitOfWork()
        repo = uow.refresh_tokens
        read, mark = repo.get_for_user, repo.mark_revoked_if_unrevoked

        def get_for_user(user_id, token):
            row = read(user_id, token)
            barrier.wait(timeout=10)
            return row

        def mark_revoked_if_unrevoked(token_id, revoked_at):
            won = mark(token_id, revoked_at)
            updates.append(won)
            return won

        repo.get_for_user = get_for_user
        repo.mark_revoked_if_unrevoked = mark_revoked_if_unrevoked
        return uow

    with file_app.app_context():
        user = User(email="race@example.com", password="p1")
        db.session.add(user)
        db.session.commit()
        user_id = user.id
        token = SqlRefreshTokenLedger().issue_for(user_id, LIFETIME).token

    racing = SqlRefreshTokenLedger(uow_factory=uow_after_shared_read)

    def rotate(_):
        with file_app.app_context():
            return racing.rotate(user_id, token, LIFETIME).status

    with ThreadPoolExecutor(max_workers=workers) as pool:
        statuses = list(pool.map(rotate, range(workers)))

    assert statuses.count(RotationResult.OK) == 1
    assert statuses.count(RotationResult.REVOKED) == workers - 1
    assert sorted(updates) == [False] * (workers - 1) + [True]
    with file_app.app_context():
        assert db.session.execute(select(func.count(RefreshToken.id))).scalar_one() == 2
