"""
Client-side view of the API rate limit.

The server reports the quota on every response through three headers:

- X-RateLimit-Limit: calls allowed per window
- X-RateLimit-Remaining: calls left in the current window
- X-RateLimit-Reset: RFC3339 time at which the window resets

The snapshot only ever mirrors those headers, it never counts calls itself.
"""

import copy
from datetime import datetime, timedelta, timezone
from typing import Mapping, Optional

from .constants import (
    QUOTA_RESET_FALLBACK,
    QUOTA_WARNING_THRESHOLD,
    RATE_LIMIT_LIMIT_HEADER,
    RATE_LIMIT_REMAINING_HEADER,
    RATE_LIMIT_RESET_HEADER,
)
from .time_utils import parse_rfc3339, format_timestamp

QUOTA_NORMAL = 'normal'
QUOTA_WARNING = 'warning'
QUOTA_EXHAUSTED = 'exhausted'


def quota_level(remaining: int) -> str:
    """
    Escalation level for a number of remaining calls.

    Returns:
        QUOTA_EXHAUSTED when nothing is left, QUOTA_WARNING when only a few
        calls are left, QUOTA_NORMAL otherwise.
    """
    if remaining <= 0:
        return QUOTA_EXHAUSTED
    if remaining <= QUOTA_WARNING_THRESHOLD:
        return QUOTA_WARNING
    return QUOTA_NORMAL


class QuotaSnapshot:
    """Last known state of the rate limit. A limit of 0 means unknown."""

    def __init__(self, limit: int = 0, remaining: int = 0, reset_at: Optional[datetime] = None):
        self.limit = limit
        self.remaining = remaining
        self.reset_at = reset_at

    def __repr__(self):
        return "QuotaSnapshot(limit=%d, remaining=%d, reset_at=%s)" % (self.limit, self.remaining, format_timestamp(self.reset_at))

    def __eq__(self, other):
        if not isinstance(other, QuotaSnapshot):
            return NotImplemented
        return (self.limit, self.remaining, self.reset_at) == (other.limit, other.remaining, other.reset_at)

    @property
    def is_known(self) -> bool:
        """True once a response reported the limit."""
        return self.limit > 0

    @property
    def level(self) -> str:
        return quota_level(self.remaining)

    def seconds_until_reset(self, now: Optional[datetime] = None) -> Optional[int]:
        if self.reset_at is None:
            return None
        now = now or datetime.now(timezone.utc)
        return int((self.reset_at - now).total_seconds())

    def copy(self) -> "QuotaSnapshot":
        return copy.copy(self)

    def update(self, headers: Mapping[str, str], now: Optional[datetime] = None):
        """
        Refresh the snapshot from a response's headers.

        Absent headers leave their field as is. An unparsable limit is
        ignored, an unparsable remaining count is taken as 0 and an
        unparsable reset time is replaced by a conservative one hour from now.

        Args:
            headers: response headers (case-insensitive mapping).
            now: reference time for the reset fallback.
        """
        limit = headers.get(RATE_LIMIT_LIMIT_HEADER)
        if limit:
            try:
                self.limit = int(limit)
            except ValueError:
                pass

        remaining = headers.get(RATE_LIMIT_REMAINING_HEADER)
        if remaining:
            try:
                self.remaining = int(remaining)
            except ValueError:
                self.remaining = 0

        reset = headers.get(RATE_LIMIT_RESET_HEADER)
        if reset:
            try:
                self.reset_at = parse_rfc3339(reset)
            except ValueError:
                now = now or datetime.now(timezone.utc)
                self.reset_at = now + timedelta(seconds=QUOTA_RESET_FALLBACK)
