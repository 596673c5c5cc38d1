"""Date manipulation utilities"""

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite returns them without tzinfo)"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def add_days(from_time: datetime, days: int) -> datetime:
    """Add whole days to a timestamp"""
    return from_time + timedelta(days=days)


def is_before(now: datetime, deadline: datetime) -> bool:
    """True strictly before the deadline; the deadline instant itself is already past"""
    return as_utc(now) < as_utc(deadline)
