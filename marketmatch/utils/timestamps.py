"""Timestamp utilities for UTC handling and listing age computation.

This module provides utilities for working with timestamps in UTC:
- Getting current UTC time
- Converting timezone-naive to timezone-aware UTC
- Parsing and formatting ISO 8601 strings for storage
- Computing whole-hour ages used by the freshness score
"""

from datetime import datetime, timezone
from typing import Optional


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


def parse_iso_datetime(iso_string: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 datetime string to UTC datetime.

    Supports:
    - 2026-10-04T12:00:00Z
    - 2026-10-04T12:00:00.123456Z
    - 2026-10-04T12:00:00+08:00
    - 2026-10-04

    Args:
        iso_string: ISO 8601 formatted datetime string

    Returns:
        Timezone-aware datetime in UTC, or None if empty or unparseable

    Example:
        >>> dt = parse_iso_datetime("2026-10-04T12:00:00Z")
        >>> dt.year == 2026 and dt.month == 10 and dt.day == 4
        True
    """
    if not iso_string or not iso_string.strip():
        return None

    cleaned = iso_string.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        try:
            return ensure_utc(datetime.strptime(iso_string.strip(), "%Y-%m-%d"))
        except ValueError:
            return None


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime as ISO 8601 string with microseconds and 'Z' suffix.

    This is the storage format used by the persistence layer.

    Args:
        dt: Datetime to format (can be None)

    Returns:
        ISO 8601 formatted string, or None if input is None

    Example:
        >>> from datetime import datetime, timezone
        >>> format_timestamp(datetime(2026, 10, 4, 12, 0, 0, tzinfo=timezone.utc))
        '2026-10-04T12:00:00.000000Z'
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return None
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def age_in_whole_hours(created_at: datetime, now: datetime) -> int:
    """Return the number of whole hours between created_at and now.

    Partial hours are truncated toward zero, so a listing created 59 minutes
    ago has age 0. A creation time in the future yields a negative age.

    Args:
        created_at: Creation timestamp
        now: Reference "current" timestamp

    Returns:
        Whole hours elapsed
    """
    delta = ensure_utc(now) - ensure_utc(created_at)
    return int(delta.total_seconds() / 3600)
