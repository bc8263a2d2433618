# tests/unit/infra/test_redis_refresh_token_ledger.py
"""
Unit tests for RedisRefreshTokenLedger using fakeredis.

They use fakeredis.FakeRedis so they run entirely in-memory.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest
from freezegun import freeze_time
from survey_basket.core.time import utcnow
from survey_basket.infra.redis import RedisRefreshTokenLedger
from survey_basket.infra.redis import redis_refresh_token_ledger as redis_ledger_module
from survey_basket.services._shared.ports import RotationResult

LIFETIME = timedelta(days=14)


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def ledger(fake_redis):
    return RedisRefreshTokenLedger(r=fake_redis)


def test_issue_writes_hash_and_index_without_ttl(ledger, fake_redis):
    record = ledger.issue_for(7, LIFETIME)

    key = f"rt:{record.token}"
    assert fake_redis.hget(key, "user_id") == b"7"
    assert fake_redis.sismember("rt:u:7", record.token)
    assert fake_redis.ttl(key) == -1


def test_find_active_round_trips_timestamps(ledger):
    record = ledger.issue_for(7, LIFETIME)

    found = ledger.find_active(7, record.token)

    assert found.user_id == 7
    assert found.revoked_at is None
    assert abs(found.expires_at - record.expires_at) < timedelta(milliseconds=1)
    assert found.expires_at.tzinfo is UTC
    assert ledger.find_active(8, record.token) is None


def test_rotate_success_then_reuse_is_revoked(ledger, fake_redis):
    record = ledger.issue_for(7, LIFETIME)

    rotation = ledger.rotate(7, record.token, LIFETIME)

    assert rotation.status is RotationResult.OK
    assert ledger.find_active(7, record.token).is_revoked
    assert ledger.find_active(7, rotation.replacement.token).is_active
    assert fake_redis.scard("rt:u:7") == 2
    assert ledger.rotate(7, record.token, LIFETIME).status is RotationResult.REVOKED


def test_rotate_rejects_unknown_wrong_user_and_expired(ledger):
    assert ledger.rotate(7, "missing", LIFETIME).status is RotationResult.NOT_FOUND

    with freeze_time("2026-01-01 00:00:00"):
        record = ledger.issue_for(7, timedelta(hours=1))
        assert ledger.rotate(8, record.token, LIFETIME).status is RotationResult.NOT_FOUND
    with freeze_time("2026-01-01 01:00:00"):
        assert ledger.rotate(7, record.token, LIFETIME).status is RotationResult.EXPIRED


def test_revoke_is_idempotent(ledger):
    record = ledger.issue_for(7, LIFETIME)

    assert ledger.revoke(record.token) is True
    first = ledger.find_active(7, record.token).revoked_at
    assert ledger.revoke(record.token) is True
    assert ledger.find_active(7, record.token).revoked_at == first
    assert ledger.revoke("missing") is False


def test_records_outlive_their_expiry(ledger):
    with freeze_time("2026-01-01 12:00:00"):
        record = ledger.issue_for(7, LIFETIME)
        rotated = ledger.issue_for(7, LIFETIME)
        assert ledger.rotate(7, rotated.token, LIFETIME).status is RotationResult.OK

    with freeze_time("2026-01-21 12:00:00"):
        assert ledger.find_active(7, record.token).is_expired
        assert ledger.rotate(7, record.token, LIFETIME).status is RotationResult.EXPIRED
        assert ledger.rotate(7, rotated.token, LIFETIME).status is RotationResult.REVOKED
        assert ledger.revoke(record.token) is True


def test_rotate_retries_after_concurrent_write_and_loses(ledger, monkeypatch):
    record = ledger.issue_for(7, LIFETIME)
    original = RedisRefreshTokenLedger._new_record
    armed = [True]
    rival = []

    def new_record_with_rival(self, user_id, lifetime):
        # A rival rotation commits while our WATCH is still open.
        if armed:
            armed.clear()
            rival.append(ledger.rotate(user_id, record.token, lifetime))
        return original(self, user_id, lifetime)

    monkeypatch.setattr(RedisRefreshTokenLedger, "_new_record", new_record_with_rival)

    rotation = ledger.rotate(7, record.token, LIFETIME)

    assert rival[0].status is RotationResult.OK
    assert rotation.status is RotationResult.REVOKED
    assert ledger.find_active(7, rival[0].replacement.token).is_active
    assert len(ledger.r.smembers("rt:u:7")) == 2


def test_revoke_retries_after_concurrent_write(ledger, fake_redis, monkeypatch):
    record = ledger.issue_for(7, LIFETIME)
    key = f"rt:{record.token}"
    rival_revoked_at = datetime(2026, 1, 2, tzinfo=UTC)
    calls = []

    def utcnow_with_rival():
        calls.append(None)
        if len(calls) == 1:
            fake_redis.hset(key, "revoked_at", repr(rival_revoked_at.timestamp()))
        return datetime.now(UTC)

    monkeypatch.setattr(redis_ledger_module, "utcnow", utcnow_with_rival)

    assert ledger.revoke(record.token) is True
    assert len(calls) == 1
    assert ledger.find_active(7, record.token).revoked_at == rival_revoked_at


def test_purge_inactive(ledger, fake_redis):
    active = ledger.issue_for(7, LIFETIME)
    revoked = ledger.issue_for(7, LIFETIME)
    ledger.revoke(revoked.token)
    other_user = ledger.issue_for(9, timedelta(seconds=30))

    deleted = ledger.purge_inactive(older_than=utcnow() + timedelta(minutes=1))

    assert deleted == 2
    assert fake_redis.exists(f"rt:{active.token}")
    assert not fake_redis.exists(f"rt:{revoked.token}")
    assert not fake_redis.exists(f"rt:{other_user.token}")


def test_decode_responses_client_is_supported():
    r = fakeredis.FakeRedis(decode_responses=True)
    ledger = RedisRefreshTokenLedger(r=r)
    record = ledger.issue_for(3, LIFETIME)

    assert ledger.rotate(3, record.token, LIFETIME).status is RotationResult.OK
    assert ledger.find_active(3, record.token).revoked_at <= datetime.now(UTC)
