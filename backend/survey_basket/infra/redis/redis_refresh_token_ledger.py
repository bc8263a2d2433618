from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import redis  # type: ignore[import-untyped]

from survey_basket.core.time import as_utc, utcnow
from survey_basket.services._shared.ports import (
    RefreshTokenLedger,
    RefreshTokenRecord,
    Rotation,
    RotationResult,
    new_refresh_token_value,
)

log = logging.getLogger(__name__)


def _s(value: bytes | str | None, default: str = "") -> str:
    if value is None:
        return default
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


@dataclass(slots=True)
class RedisRefreshTokenLedger(RefreshTokenLedger):
    """
    Redis-backed refresh token ledger with atomic rotation.

    Layout:

    - ``rt:{token}``: hash with ``user_id``, ``issued_at``, ``expires_at`` and
      ``revoked_at`` (epoch seconds, empty while not revoked).
    - ``rt:u:{user_id}``: set of the user's token values.

    Keys never expire on their own: expired and revoked records stay
    resolvable until :meth:`purge_inactive` sweeps them.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token: str) -> str:
        return f"rt:{token}"

    @staticmethod
    def _ku(user_id: int) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> float:
        return as_utc(dt).timestamp()

    @staticmethod
    def _from_ts(raw: str) -> datetime:
        return datetime.fromtimestamp(float(raw), tz=UTC)

    def _mapping(self, record: RefreshTokenRecord) -> dict[str, str]:
        return {
            "user_id": str(record.user_id),
            "issued_at": repr(self._to_ts(record.issued_at)),
            "expires_at": repr(self._to_ts(record.expires_at)),
            "revoked_at": "",
        }

    def _record(self, token: str, h: dict) -> RefreshTokenRecord:
        revoked_raw = _s(h.get(b"revoked_at", h.get("revoked_at")))
        return RefreshTokenRecord(
            token=token,
            user_id=int(_s(h.get(b"user_id", h.get("user_id")), "0")),
            issued_at=self._from_ts(_s(h.get(b"issued_at", h.get("issued_at")), "0")),
            expires_at=self._from_ts(_s(h.get(b"expires_at", h.get("expires_at")), "0")),
            revoked_at=self._from_ts(revoked_raw) if revoked_raw else None,
        )

    def _new_record(self, user_id: int, lifetime: timedelta) -> RefreshTokenRecord:
        now = utcnow()
        return RefreshTokenRecord(
            token=new_refresh_token_value(),
            user_id=user_id,
            issued_at=now,
            expires_at=now + lifetime,
        )

    # -------------------- API ------------------------

    def issue_for(self, user_id: int, lifetime: timedelta) -> RefreshTokenRecord:
        record = self._new_record(user_id, lifetime)
        pipe = self.r.pipeline(transaction=True)
        pipe.hset(self._k(record.token), mapping=self._mapping(record))
        pipe.sadd(self._ku(user_id), record.token)
        pipe.execute()
        return record

    def _get(self, token: str) -> RefreshTokenRecord | None:
        h = self.r.hgetall(self._k(token))
        if not h:
            return None
        return self._record(token, h)

    def find_active(self, user_id: int, token: str) -> RefreshTokenRecord | None:
        record = self._get(token)
        if record is None or record.user_id != user_id:
            return None
        return record

    def revoke(self, token: str) -> bool:
        key = self._k(token)
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    h = p.hgetall(key)
                    if not h:
                        p.unwatch()
                        return False
                    if _s(h.get(b"revoked_at", h.get("revoked_at"))):
                        p.unwatch()
                        return True
                    p.multi()
                    p.hset(key, "revoked_at", repr(self._to_ts(utcnow())))
                    p.execute()
                return True
            except redis.WatchError:
                # Concurrent modification detected; retry loop
                continue

    def rotate(self, user_id: int, token: str, lifetime: timedelta) -> Rotation:
        """
        Atomically revoke ``token`` and create its replacement.

        Uses WATCH/MULTI/EXEC (optimistic locking): when another client
        touches the key between the read and the commit, the loop re-reads
        and the loser observes ``REVOKED``.
        """
        key = self._k(token)
        k_user = self._ku(user_id)

        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    h = p.hgetall(key)
                    if not h:
                        p.unwatch()
                        return Rotation(RotationResult.NOT_FOUND)

                    current = self._record(token, h)
                    if current.user_id != user_id:
                        p.unwatch()
                        return Rotation(RotationResult.NOT_FOUND)
                    if current.is_revoked:
                        p.unwatch()
                        return Rotation(RotationResult.REVOKED)
                    if current.is_expired:
                        p.unwatch()
                        return Rotation(RotationResult.EXPIRED)

                    replacement = self._new_record(user_id, lifetime)
                    k_new = self._k(replacement.token)

                    p.multi()
                    p.hset(key, "revoked_at", repr(self._to_ts(replacement.issued_at)))
                    p.hset(k_new, mapping=self._mapping(replacement))
                    p.sadd(k_user, replacement.token)
                    p.execute()
                return Rotation(RotationResult.OK, replacement)
            except redis.WatchError:
                log.debug("auth.ledger.rotate_retry")
                continue

    def purge_inactive(self, *, older_than: datetime) -> int:
        cutoff = as_utc(older_than)
        deleted = 0
        for key_u in self.r.scan_iter(match="rt:u:*"):
            user_key = _s(key_u)
            for member in self.r.smembers(user_key):
                token = _s(member)
                record = self._get(token)
                stale = record is None or (
                    as_utc(record.expires_at) <= cutoff
                    or (record.revoked_at is not None and record.revoked_at <= cutoff)
                )
                if not stale:
                    continue
                pipe = self.r.pipeline(transaction=True)
                pipe.delete(self._k(token))
                pipe.srem(user_key, token)
                pipe.execute()
                if record is not None:
                    deleted += 1
        return deleted
