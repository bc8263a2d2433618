from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum, auto
from typing import Protocol

from survey_basket.core.time import as_utc, utcnow

TOKEN_BYTES = 64


def new_refresh_token_value() -> str:
    """Return a cryptographically random, URL-safe refresh token value."""
    return secrets.token_urlsafe(TOKEN_BYTES)


class RotationResult(Enum):
    """Outcome of an atomic refresh rotation attempt."""

    OK = auto()
    NOT_FOUND = auto()
    EXPIRED = auto()
    REVOKED = auto()


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Store-neutral view of a refresh token owned by a user.

    :ivar token: Opaque random value handed to the client.
    :ivar user_id: Owner user id.
    :ivar issued_at: Creation instant (UTC).
    :ivar expires_at: Absolute expiration (UTC).
    :ivar revoked_at: Revocation instant, ``None`` while not revoked.
    """

    token: str
    user_id: int
    issued_at: datetime
    expires_at: datetime
    revoked_at: datetime | None = None

    @property
    def is_expired(self) -> bool:
        # A token expiring exactly now is already expired.
        return utcnow() >= as_utc(self.expires_at)

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    @property
    def is_active(self) -> bool:
        return not self.is_revoked and not self.is_expired


@dataclass(frozen=True, slots=True)
class Rotation:
    """
    Result of :meth:`RefreshTokenLedger.rotate`.

    :ivar status: Rotation outcome.
    :ivar replacement: Newly issued record when ``status`` is ``OK``.
    """

    status: RotationResult
    replacement: RefreshTokenRecord | None = None


class RefreshTokenLedger(Protocol):
    """
    Per-user collection of refresh token records.

    Revocation is monotonic and :meth:`rotate` MUST be atomic per token value:
    two concurrent rotations of the same token never both return ``OK``.
    """

    def issue_for(self, user_id: int, lifetime: timedelta) -> RefreshTokenRecord:
        """Generate, persist and return a new record expiring ``now + lifetime``."""
        ...

    def find_active(self, user_id: int, token: str) -> RefreshTokenRecord | None:
        """
        Look up ``token`` among the user's records.

        Inactive records are returned too; callers check ``is_active``.
        """
        ...

    def revoke(self, token: str) -> bool:
        """Set ``revoked_at`` if unset. :returns: ``False`` when the token is unknown."""
        ...

    def rotate(self, user_id: int, token: str, lifetime: timedelta) -> Rotation:
        """Atomically revoke ``token`` and issue its replacement."""
        ...

    def purge_inactive(self, *, older_than: datetime) -> int:
        """
        Delete records that expired or were revoked before ``older_than``.

        :returns: Number of deleted records.
        """
        ...


class InMemoryRefreshTokenLedger(RefreshTokenLedger):
    """
    Process-local ledger with lock-based atomic rotation.

    .. note::
       Suitable for tests and single-process development servers only.
    """

    def __init__(self) -> None:
        self._by_token: dict[str, RefreshTokenRecord] = {}
        self._lock = threading.Lock()

    def _new_record(self, user_id: int, lifetime: timedelta) -> RefreshTokenRecord:
        now = utcnow()
        return RefreshTokenRecord(
            token=new_refresh_token_value(),
            user_id=user_id,
            issued_at=now,
            expires_at=now + lifetime,
        )

    def issue_for(self, user_id: int, lifetime: timedelta) -> RefreshTokenRecord:
        record = self._new_record(user_id, lifetime)
        with self._lock:
            self._by_token[record.token] = record
        return record

    def find_active(self, user_id: int, token: str) -> RefreshTokenRecord | None:
        record = self._by_token.get(token)
        if record is None or record.user_id != user_id:
            return None
        return record

    def revoke(self, token: str) -> bool:
        with self._lock:
            record = self._by_token.get(token)
            if record is None:
                return False
            if record.revoked_at is None:
                self._by_token[token] = replace(record, revoked_at=utcnow())
            return True

    def rotate(self, user_id: int, token: str, lifetime: timedelta) -> Rotation:
        with self._lock:
            record = self._by_token.get(token)
            if record is None or record.user_id != user_id:
                return Rotation(RotationResult.NOT_FOUND)
            if record.is_revoked:
                return Rotation(RotationResult.REVOKED)
            if record.is_expired:
                return Rotation(RotationResult.EXPIRED)

            self._by_token[token] = replace(record, revoked_at=utcnow())
            replacement = self._new_record(user_id, lifetime)
            self._by_token[replacement.token] = replacement
            return Rotation(RotationResult.OK, replacement)

    def purge_inactive(self, *, older_than: datetime) -> int:
        cutoff = as_utc(older_than)
        with self._lock:
            stale = [
                token
                for token, r in self._by_token.items()
                if as_utc(r.expires_at) <= cutoff
                or (r.revoked_at is not None and as_utc(r.revoked_at) <= cutoff)
            ]
            for token in stale:
                del self._by_token[token]
        return len(stale)
