"""Time utilities (UTC)."""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """
    Current time in UTC, returned as naive datetime for DB storage.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(dt: datetime) -> datetime:
    """Normalize a datetime to naive UTC. Naive values are assumed UTC."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def utc_date(dt: datetime) -> date:
    """Calendar date (UTC) of a timestamp."""
    return to_utc_naive(dt).date()


def to_iso(dt: datetime) -> str:
    """ISO-8601 string with explicit UTC offset."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()
