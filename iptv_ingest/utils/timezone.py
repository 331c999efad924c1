"""
Date and Time utilities

This module handles XMLTV and ISO8601 timestamp parsing.
Centralizes all date parsing logic to maintain consistency across the package.
"""
from datetime import datetime, timedelta, timezone
import logging
import re


logger = logging.getLogger(__name__)

_XMLTV_DIGITS = re.compile(r"\s*([0-9]+)")
_XMLTV_OFFSET = re.compile(r"\s*([+-])([0-9]{2})([0-9]{2})")


class DateFormatError(ValueError):
    """Raised when date format is invalid"""
    pass


def _normalize_iso8601_string(date_str: str) -> str:
    """Normalize ISO8601 string by replacing 'Z' with '+00:00'

    Args:
        date_str: ISO8601 datetime string

    Returns:
        Normalized string with explicit timezone offset
    """
    return date_str.replace('Z', '+00:00') if date_str.endswith('Z') else date_str


def parse_iso8601_to_utc(date_str: str) -> datetime:
    """
    Parse ISO8601 date string and convert to UTC datetime

    Args:
        date_str: ISO8601 datetime string (e.g., '2026-01-23T10:00:00Z' or '2026-01-23T10:00:00+01:00')

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        DateFormatError: If the date string format is invalid
    """
    try:
        normalized = _normalize_iso8601_string(date_str)
        dt = datetime.fromisoformat(normalized)
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    except (ValueError, AttributeError, TypeError) as e:
        raise DateFormatError(f"Invalid ISO8601 datetime format: '{date_str}'") from e


def parse_xmltv_time(time_str: str | None, *, apply_offset: bool = False) -> datetime | None:
    """
    Convert an XMLTV timestamp to a UTC datetime

    Only the first 14 digits (YYYYMMDDHHMMSS) are used. The timezone suffix is
    ignored unless apply_offset is set, in which case a '+HHMM'/'-HHMM' suffix
    shifts the result to UTC.

    Args:
        time_str: XMLTV time like '20260121120000 +0000'

    Returns:
        Timezone-aware datetime in UTC, or None when fewer than 14 digits are
        present or the digits do not form a calendar date
    """
    if not time_str:
        return None

    match = _XMLTV_DIGITS.match(time_str)
    if match is None or len(match.group(1)) < 14:
        return None
    digits = match.group(1)[:14]

    try:
        dt = datetime(
            int(digits[0:4]),
            int(digits[4:6]),
            int(digits[6:8]),
            int(digits[8:10]),
            int(digits[10:12]),
            int(digits[12:14]),
            tzinfo=timezone.utc,
        )
    except ValueError:
        logger.debug("Rejected XMLTV timestamp with impossible date: %s", time_str)
        return None

    if apply_offset:
        offset = _XMLTV_OFFSET.match(time_str, match.end())
        if offset is not None:
            sign = 1 if offset.group(1) == '+' else -1
            minutes = sign * (int(offset.group(2)) * 60 + int(offset.group(3)))
            dt = dt - timedelta(minutes=minutes)

    return dt
