"""Calendar Dates - Pure helpers for calendar-date keys.

A calendar-date key is a ``YYYY-MM-DD`` string in the user's local timezone.
Keys are converted to and from ``datetime.date`` only, never through a UTC
timestamp, so a key can't shift by a day near midnight.

"Now" is always passed in by the caller; nothing here reads the system clock
except the ``now=None`` convenience default.
"""

import logging
from datetime import date, datetime, timedelta, timezone as dt_timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/New_York"


def parse_local_date_key(key: str) -> date:
    """Parse a calendar-date key into a local calendar date.

    Raises:
        ValueError: If the key is not a valid YYYY-MM-DD date
    """
    return date.fromisoformat(key)


def format_date_key(value: date) -> str:
    """Format a date (or the local fields of a datetime) as a calendar-date key."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def is_date_key(key: object) -> bool:
    """Check that a value is a canonical YYYY-MM-DD key."""
    if not isinstance(key, str):
        return False
    try:
        return format_date_key(parse_local_date_key(key)) == key
    except ValueError:
        return False


def resolve_timezone(name: str | None) -> ZoneInfo | None:
    """Look up an IANA timezone.

    Returns None for an empty name, meaning the host's local timezone. An
    unknown name falls back to DEFAULT_TIMEZONE.
    """
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using %s", name, DEFAULT_TIMEZONE)
        return ZoneInfo(DEFAULT_TIMEZONE)


def local_now(timezone: str | None, now: datetime | None = None) -> datetime:
    """Express an instant as wall-clock time in the given timezone.

    Args:
        timezone: IANA name, or None for the host's local timezone
        now: The instant to convert (naive values are taken as UTC)

    Returns:
        Timezone-aware local datetime
    """
    if now is None:
        now = datetime.now(dt_timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=dt_timezone.utc)
    return now.astimezone(resolve_timezone(timezone))


def today_key(timezone: str | None, now: datetime | None = None) -> str:
    """Get today's calendar-date key in the given timezone."""
    return format_date_key(local_now(timezone, now))


def shift_date_key(key: str, days: int) -> str:
    """Move a calendar-date key by a number of days."""
    return format_date_key(parse_local_date_key(key) + timedelta(days=days))


def days_between(earlier: str, later: str) -> int:
    """Count calendar days from one key to another."""
    return (parse_local_date_key(later) - parse_local_date_key(earlier)).days
