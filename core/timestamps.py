# ============================================================================
# TIMESTAMP CODEC
# ============================================================================
# STATUS: Foundation - Provider wire-format timestamps
# PURPOSE: Parse and render RFC 3339 timestamps, UTC clock helpers
# CREATED: 19 OCT 2026
# ============================================================================
"""
Timestamp codec.

The provider sends RFC 3339 timestamps such as ``2026-10-01T00:00:00+00:00``
(occasionally with a ``Z`` suffix or fractional seconds). Everything is
normalized to timezone-aware UTC on the way in and rendered back with an
explicit ``+00:00`` offset on the way out.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from core.errors import MappingError


# date, time, optional fraction, then Z or a numeric offset with a colon
_RFC3339 = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt ](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$"
)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """
    Parse a provider timestamp into an aware UTC datetime.

    Only full RFC 3339 date-times are accepted: seconds are required and
    the offset must be ``Z`` or ``+HH:MM``. Fractions beyond microseconds
    are truncated.

    Raises:
        MappingError: value is not a string or not RFC 3339.
    """
    if not isinstance(value, str) or not value:
        raise MappingError(f"Failed to parse timestamp: {value!r}")

    match = _RFC3339.match(value.strip())
    if match is None:
        raise MappingError(f"Failed to parse timestamp {value!r}: not RFC 3339")

    date_part, time_part, fraction, offset = match.groups()
    if fraction:
        time_part = f"{time_part}.{fraction[:6].ljust(6, '0')}"
    if offset in ("Z", "z"):
        offset = "+00:00"

    try:
        parsed = datetime.fromisoformat(f"{date_part}T{time_part}{offset}")
    except ValueError as e:
        raise MappingError(f"Failed to parse timestamp {value!r}: {e}") from e

    return parsed.astimezone(timezone.utc)


def parse_optional_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a timestamp that may be absent."""
    if value is None:
        return None
    return parse_timestamp(value)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Render a datetime in the provider wire format (UTC, ``+00:00``)."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def age_cutoff(now: datetime, max_age_days: int) -> datetime:
    """Oldest ``expires_at`` still considered recent."""
    return now - timedelta(days=max_age_days)


def elapsed_ms(since: datetime, now: datetime) -> int:
    """Whole milliseconds between two aware datetimes."""
    return int((now - since) / timedelta(milliseconds=1))


__all__ = [
    "utcnow",
    "parse_timestamp",
    "parse_optional_timestamp",
    "format_timestamp",
    "age_cutoff",
    "elapsed_ms",
]
