# tests/unit/infra/test_in_memory_ledger.py
from __future__ import annotations

from datetime import timedelta

import pytest
from freezegun import freeze_time
from survey_basket.core.time import utcnow
from survey_basket.services._shared.ports import InMemoryRefreshTokenLedger, RotationResult

LIFETIME = timedelta(days=14)


@pytest.fixture()
def ledger():
    return InMemoryRefreshTokenLedger()


def test_issue_generates_unique_active_tokens(ledger):
    tokens = {ledger.issue_for(1, LIFETIME).token for _ in range(50)}

    assert len(tokens) == 50
    assert all(ledger.find_active(1, t).is_active for t in tokens)


def test_issue_sets_expiry_from_lifetime(ledger):
    record = ledger.issue_for(1, LIFETIME)

    assert record.expires_at - record.issued_at == LIFETIME
    assert record.revoked_at is None


def test_find_active_is_scoped_to_user(ledger):
    record = ledger.issue_for(1, LIFETIME)

    assert ledger.find_active(2, record.token) is None
    assert ledger.find_active(1, "missing") is None


def test_revoke_is_monotonic(ledger):
    record = ledger.issue_for(1, LIFETIME)

    assert ledger.revoke(record.token) is True
    first = ledger.find_active(1, record.token).revoked_at
    assert ledger.revoke(record.token) is True
    assert ledger.find_active(1, record.token).revoked_at == first
    assert ledger.revoke("missing") is False


def test_rotate_revokes_and_replaces(ledger):
    record = ledger.issue_for(1, LIFETIME)

    rotation = ledger.rotate(1, record.token, LIFETIME)

    assert rotation.status is RotationResult.OK
    assert rotation.replacement.token != record.token
    assert ledger.find_active(1, record.token).is_revoked
    assert ledger.rotate(1, record.token, LIFETIME).status is RotationResult.REVOKED


def test_rotate_rejects_expired_and_unknown(ledger):
    with freeze_time("2026-01-01"):
        record = ledger.issue_for(1, timedelta(days=1))
    with freeze_time("2026-01-02"):
        assert ledger.rotate(1, record.token, LIFETIME).status is RotationResult.EXPIRED
    assert ledger.rotate(2, record.token, LIFETIME).status is RotationResult.NOT_FOUND


def test_purge_inactive_keeps_active_records(ledger):
    active = ledger.issue_for(1, LIFETIME)
    revoked = ledger.issue_for(1, LIFETIME)
    ledger.revoke(revoked.token)

    deleted = ledger.purge_inactive(older_than=utcnow() + timedelta(seconds=1))

    assert deleted == 1
    assert ledger.find_active(1, active.token) is not None
    assert ledger.find_active(1, revoked.token) is None
