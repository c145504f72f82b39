"""
UTC helpers.

Every timestamp in this service is compared in UTC. Backends without
timezone support (SQLite) hand back naive datetimes; those are read as UTC.
"""
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_date(value: datetime, tz_name: str) -> date:
    """Calendar date of a timestamp as seen in the given time zone."""
    return as_utc(value).astimezone(ZoneInfo(tz_name)).date()


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes elapsed from start to end, rounded down."""
    return int((as_utc(end) - as_utc(start)).total_seconds() // 60)


def localize(value: Optional[datetime], tz_name: str) -> Optional[datetime]:
    if value is None:
        return None
    return as_utc(value).astimezone(ZoneInfo(tz_name))
