"""Timestamp utilities for UTC handling and date arithmetic.

This module provides utilities for working with timestamps in UTC:
- Getting current UTC time and today's UTC date
- Parsing ISO 8601 date and datetime strings
- Converting timezone-naive to timezone-aware UTC
- Day-level helpers used by the availability checker
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Current UTC time with timezone info

    Example:
        >>> now = utc_now()
        >>> now.tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Get today's date in UTC.

    Used as the default reference date when scoring availability.
    """
    return utc_now().date()


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    If the datetime is timezone-naive, it's treated as UTC.
    If the datetime has a different timezone, it's converted to UTC.

    Args:
        dt: Datetime to convert (can be None)

    Returns:
        Timezone-aware datetime in UTC, or None if input is None
    """
    if dt is None:
        return None

    # If timezone-naive, treat as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def as_date(value: Union[date, datetime, None]) -> Optional[date]:
    """Reduce a date or datetime to a calendar date (UTC for datetimes)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value).date()
    return value


def parse_iso_date(iso_string: Optional[str]) -> Optional[date]:
    """Parse an ISO 8601 date or datetime string to a calendar date.

    Supports:
    - 2026-11-04
    - 2026-11-04T12:00:00Z
    - 2026-11-04T12:00:00+02:00

    Args:
        iso_string: ISO 8601 formatted string

    Returns:
        Date (datetimes are converted to UTC first), or None if parsing fails

    Example:
        >>> parse_iso_date("2026-11-04")
        datetime.date(2026, 11, 4)
    """
    if not iso_string or not iso_string.strip():
        return None

    cleaned = iso_string.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        if "T" in cleaned:
            return as_date(datetime.fromisoformat(cleaned))
        return date.fromisoformat(cleaned)
    except ValueError:
        return None


def add_days(day: date, days: int) -> date:
    """Return the date ``days`` days after ``day``."""
    return day + timedelta(days=days)


def days_between(start: date, end: date) -> int:
    """Signed number of days from ``start`` to ``end``."""
    return (end - start).days


def format_timestamp(dt: datetime, include_microseconds: bool = False) -> str:
    """Format a datetime as ISO 8601 string in UTC.

    Args:
        dt: Datetime to format
        include_microseconds: Whether to include microseconds in output

    Returns:
        ISO 8601 formatted string with 'Z' suffix

    Example:
        >>> from datetime import datetime, timezone
        >>> dt = datetime(2026, 11, 4, 12, 0, 0, tzinfo=timezone.utc)
        >>> format_timestamp(dt)
        '2026-11-04T12:00:00Z'
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return ""

    if include_microseconds:
        return dt_utc.strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%SZ")
