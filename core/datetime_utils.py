"""
UTC-first datetime utilities for the Eye Pressure Dashboard.

Design Principles:
- Internal processing: Always use datetime with UTC timezone
- Wire format: ISO 8601 strings with 'Z' suffix
- Display: calendar dates and clock times are rendered in the configured
  display timezone (Settings.iop_display_timezone)

Usage:
    from core.datetime_utils import parse_datetime, format_iso, format_calendar_date

    dt = parse_datetime("2024-01-15T10:30:00+08:00")  # Converts to UTC
    iso_str = format_iso(dt)                           # "2024-01-15T02:30:00.000Z"
    format_calendar_date(dt, ZoneInfo("Asia/Shanghai"))  # "2024/01/15"
"""
import logging
import math
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional, Union

logger = logging.getLogger(__name__)


# =============================================================================
# CORE UTILITIES
# =============================================================================

def utc_now() -> datetime:
    """Get current datetime in UTC with timezone info."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    - If datetime is naive (no timezone), assumes it's already UTC
    - If datetime has timezone, converts to UTC
    """
    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=timezone.utc)
    else:
        return dt.astimezone(timezone.utc)


def to_local(dt: datetime, tz: tzinfo) -> datetime:
    """Convert a datetime to the given display timezone."""
    return to_utc(dt).astimezone(tz)


# =============================================================================
# PARSING
# =============================================================================

def parse_datetime(value: Union[str, datetime], default_tz: Optional[tzinfo] = None) -> datetime:
    """
    Parse a datetime value to UTC datetime.

    Accepts a datetime object or an ISO 8601 string (date-only strings such
    as Notion's "2024-01-15" are read as midnight). Values without an offset
    are interpreted in default_tz, or UTC when it is not given.

    Raises:
        ValueError: If the value cannot be parsed.

    Examples:
        >>> parse_datetime("2024-01-15T10:30:00.000Z")
        datetime.datetime(2024, 1, 15, 10, 30, tzinfo=datetime.timezone.utc)
    """
    if isinstance(value, datetime):
        return _localize(value, default_tz)

    if not isinstance(value, str):
        raise ValueError(f"Expected datetime or string, got {type(value).__name__}")

    value = value.strip()
    if not value:
        raise ValueError("Cannot parse empty datetime string")

    # Handle 'Z' suffix (UTC indicator)
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Cannot parse datetime: '{value}'")
    return _localize(parsed, default_tz)


def _localize(dt: datetime, default_tz: Optional[tzinfo]) -> datetime:
    if dt.tzinfo is None and default_tz is not None:
        dt = dt.replace(tzinfo=default_tz)
    return to_utc(dt)


def parse_datetime_safe(
    value: Union[str, datetime, None],
    default_tz: Optional[tzinfo] = None,
) -> Optional[datetime]:
    """
    Parse datetime with graceful error handling.

    Returns:
        Parsed datetime in UTC, or None if parsing fails or input is None.
    """
    if value is None:
        return None
    try:
        return parse_datetime(value, default_tz)
    except ValueError as e:
        logger.warning(f"Failed to parse datetime '{value}': {e}")
        return None


# =============================================================================
# FORMATTING
# =============================================================================

def format_iso(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 string with millisecond precision and 'Z'.

    Example:
        >>> format_iso(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        '2024-01-15T10:30:00.000Z'
    """
    utc_dt = to_utc(dt)
    return utc_dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc_dt.microsecond // 1000:03d}Z"


def format_calendar_date(dt: datetime, tz: tzinfo) -> str:
    """Format as YYYY/MM/DD in the display timezone."""
    return to_local(dt, tz).strftime("%Y/%m/%d")


def format_clock_time(dt: datetime, tz: tzinfo) -> str:
    """Format as zero-padded HH:MM in the display timezone."""
    return to_local(dt, tz).strftime("%H:%M")


def format_month_day(dt: datetime, tz: tzinfo) -> str:
    """Format as MM/DD in the display timezone."""
    return to_local(dt, tz).strftime("%m/%d")


def format_month_day_time(dt: datetime, tz: tzinfo) -> str:
    """Format as MM/DD HH:MM in the display timezone."""
    return to_local(dt, tz).strftime("%m/%d %H:%M")


def local_date(dt: datetime, tz: tzinfo) -> date:
    """Get the calendar date of a datetime in the display timezone."""
    return to_local(dt, tz).date()


# =============================================================================
# ARITHMETIC
# =============================================================================

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding towards +infinity."""
    return int(math.floor(value + 0.5))


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, rounded to the nearest minute."""
    delta: timedelta = to_utc(end) - to_utc(start)
    return round_half_up(delta.total_seconds() / 60)
