"""UTC time helpers shared by the lifecycle and rating rules."""

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return *value* as an aware UTC datetime.

    SQLite hands back naive datetimes even for ``DateTime(timezone=True)``
    columns; those are stored in UTC, so they are tagged rather than converted.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def remaining(deadline: datetime, now: datetime) -> timedelta:
    """Time left until *deadline*, clamped at zero."""
    return max(timedelta(0), as_utc(deadline) - as_utc(now))
