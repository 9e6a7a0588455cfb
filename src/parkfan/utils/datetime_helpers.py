"""
Datetime decomposition helpers for upstream schedule strings.

Upstream opening/closing times look like "2025-06-27T09:30:00+08:00". The
calendar date and the wall-clock time are read straight off the literal so
the park's local offset is kept as printed. Only strings that do not match
the ISO shape go through a real parser, and those are read in UTC.
"""

import re
from datetime import date, datetime, time, timezone
from typing import Optional

from dateutil import parser as date_parser

from .logger import logger

_DATE_PREFIX = re.compile(r'^(\d{4}-\d{2}-\d{2})')
_TIME_OF_DAY = re.compile(r'T(\d{2}:\d{2}:\d{2})')


def _parse_as_utc(value: str) -> Optional[datetime]:
    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError, TypeError) as e:
        logger.warning(f"Failed to parse datetime string '{value}': {e}")
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed


def extract_date(value: Optional[str]) -> Optional[date]:
    """
    Extract the calendar date from an ISO datetime string.

    Args:
        value: ISO-8601 string, optionally with offset

    Returns:
        Offset-naive date, or None if the string is empty or unparseable

    Example:
        >>> extract_date("2025-06-27T09:30:00+08:00")
        datetime.date(2025, 6, 27)
    """
    if not value:
        return None

    match = _DATE_PREFIX.match(value)
    if match:
        try:
            return datetime.strptime(match.group(1), '%Y-%m-%d').date()
        except ValueError:
            pass

    parsed = _parse_as_utc(value)
    return parsed.date() if parsed else None


def extract_time(value: Optional[str]) -> Optional[str]:
    """
    Extract the wall-clock time ("HH:MM:SS") from an ISO datetime string.

    The offset is ignored, not applied.

    Example:
        >>> extract_time("2025-06-27T09:30:00+08:00")
        '09:30:00'
    """
    if not value:
        return None

    match = _TIME_OF_DAY.search(value)
    if match:
        return match.group(1)

    parsed = _parse_as_utc(value)
    return parsed.strftime('%H:%M:%S') if parsed else None


def to_time_of_day(value: Optional[str]) -> Optional[time]:
    """Convert an "HH:MM:SS" string into a time object for TIME columns."""
    if not value:
        return None
    try:
        return datetime.strptime(value, '%H:%M:%S').time()
    except ValueError:
        logger.warning(f"Invalid time of day '{value}'")
        return None


def parse_instant(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a full ISO timestamp into a naive UTC datetime (show times).
    """
    if not value:
        return None
    parsed = _parse_as_utc(value)
    return parsed.replace(tzinfo=None) if parsed else None


def utc_now() -> datetime:
    """Naive UTC timestamp used for recorded_at / last_synced columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
