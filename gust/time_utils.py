"""
Time utilities for the gust SDK.

Rate limit reset times are sent as RFC3339 timestamps:
- "2025-12-30T10:00:00Z"
- "2025-12-30T10:00:00+05:00"
- "2025-12-30T10:00:00.123456789Z" (fractions longer than microseconds are truncated)
"""

import re
from datetime import datetime, timezone
from typing import Optional

_FRACTION_RE = re.compile(r'\.(\d+)')

_RFC3339_FORMATS = [
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
]


def parse_rfc3339(value):
    """
    Parse an RFC3339 timestamp into a timezone-aware UTC datetime.

    A timezone designator is required, as in RFC3339.

    Parameters:
        value (str): timestamp to parse.

    Return:
        datetime: the parsed time, in UTC.

    Raises:
        ValueError: If the value is not an RFC3339 timestamp.
    """
    if value is None:
        raise ValueError("Time string cannot be empty")

    value = value.strip()
    if value == '':
        raise ValueError("Time string cannot be empty")

    # strptime only understands up to microseconds.
    value = _FRACTION_RE.sub(lambda m: '.' + m.group(1)[:6], value, count=1)

    for fmt in _RFC3339_FORMATS:
        try:
            dt = datetime.strptime(value, fmt)
        except ValueError:
            continue
        return dt.astimezone(timezone.utc)

    raise ValueError(f"Unable to parse RFC3339 time: '{value}'")


def format_timestamp(dt: Optional[datetime]) -> str:
    """
    Format a datetime as RFC3339 in UTC, or "unknown" when not set.
    """
    if dt is None:
        return 'unknown'
    return dt.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


def format_clock(dt: Optional[datetime]) -> str:
    """
    Format a datetime as a local wall clock time ("15:04").
    """
    if dt is None:
        return '--:--'
    return dt.astimezone().strftime('%H:%M')


def format_retry_after(seconds: Optional[int]) -> str:
    """
    Build the "try again in" message shown when the quota is exhausted.

    Minutes are rounded up so the user is never told to come back too early.

    Parameters:
        seconds (int): seconds until the quota resets, None if unknown.

    Return:
        str: message for the user.
    """
    if seconds is None or seconds <= 0:
        return "rate limit reached, please try again later"

    minutes = seconds // 60 + 1
    hours = minutes // 60
    if hours > 0:
        return "please try again in about %d hour(s) and %d minute(s) when your rate limit resets" % (hours, minutes % 60)
    return "please try again in about %d minute(s) when your rate limit resets" % (minutes,)
