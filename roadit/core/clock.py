# roadit/core/clock.py
from datetime import datetime, timezone


def truncate_ms(value: datetime) -> datetime:
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    """Current UTC time at millisecond precision, the resolution timestamps are persisted with."""
    return truncate_ms(datetime.now(timezone.utc))


def format_timestamp(value: datetime) -> str:
    # Same shape as a browser's Date.toJSON(): 2025-07-15T10:00:00.000Z
    return as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")
