"""Date parsing and rendering utilities for report target dates."""

from datetime import datetime, timedelta, timezone

TBD = "TBD"

# Values reporters use when no date has been committed to
_UNSET_VALUES = {"", "tbd", "n/a"}


def parse_target_date(raw: str) -> datetime | None:
    """Parse a free-form target date into a UTC datetime.

    Supports:
    - ISO dates: 2025-01-15
    - RFC 3339: 2025-01-15T10:30:00Z, 2025-01-15T10:30:00+02:00
    - Datetimes without zone: 2025-01-15 10:30:00, 2025-01-15T10:30:00

    Args:
        raw: Date text from a status report

    Returns:
        Parsed datetime in UTC, or None for blank, TBD, N/A or unrecognized
        values
    """
    value = raw.strip()
    if value.lower() in _UNSET_VALUES:
        return None

    formats = [
        "%Y-%m-%d",  # 2025-01-15
        "%Y-%m-%dT%H:%M:%S%z",  # 2025-01-15T10:30:00Z
        "%Y-%m-%dT%H:%M:%S.%f%z",  # 2025-01-15T10:30:00.123Z
        "%Y-%m-%d %H:%M:%S",  # 2025-01-15 10:30:00
        "%Y-%m-%dT%H:%M:%S",  # 2025-01-15T10:30:00
    ]

    for fmt in formats:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    return None


def render_target_date(value: datetime | None) -> str:
    """Format a target date as YYYY-MM-DD in UTC, or "TBD" when unset."""
    if value is None:
        return TBD
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%d")


def window_start(days: int, now: datetime | None = None) -> datetime:
    """Convert a look-back window in days to its (aware, UTC) start time.

    Raises:
        ValueError: If days is not a positive integer
    """
    if days <= 0:
        raise ValueError("Days must be a positive integer")
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=days)
