"""UTC clock helpers shared by models, ledgers and services."""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current timezone-aware UTC instant."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """
    Label naive datetimes as UTC and convert aware ones to UTC.

    SQLite drops tzinfo on round-trip, so values read back from the database
    are naive even though they were written as UTC.

    :param value: Datetime to normalise.
    :returns: Timezone-aware UTC datetime.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
