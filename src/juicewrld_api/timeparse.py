"""Tolerant timestamp parsing and canonical RFC3339 formatting.

The API is inconsistent about date formats across record types (full
timestamps on albums, bare dates on some songs, naive datetimes on file
listings). Parsing never fails: unknown or empty input yields None.
"""

import re
from datetime import datetime, timezone

from loguru import logger

log = logger.bind(stage="timeparse")

# Tried in order, first match wins
TIME_FORMATS: tuple[str, ...] = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S",
)

_ABSENT_VALUES = frozenset({"", "null"})

# strptime's %f accepts at most 6 digits; RFC3339 allows up to 9
_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")


def parse_flexible_time(raw: object) -> datetime | None:
    """Parse a timestamp in any supported format.

    Accepts a string (optionally wrapped in double quotes), None, or an
    existing datetime. Returns an aware datetime, with naive inputs read
    as UTC, or None when the value is empty, "null", or unparseable.
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw if raw.tzinfo else raw.replace(tzinfo=timezone.utc)
    if not isinstance(raw, str):
        log.debug(f"Ignoring non-string timestamp {raw!r}")
        return None

    text = raw.strip().strip('"').strip()
    if text.lower() in _ABSENT_VALUES:
        return None

    text = _LONG_FRACTION.sub(r"\1", text)
    for fmt in TIME_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    log.debug(f"Unrecognized timestamp {raw!r}, leaving unset")
    return None


def format_rfc3339(value: datetime | None) -> str | None:
    """Format a datetime as RFC3339 with whole seconds.

    UTC is written as "Z", other offsets as +HH:MM. None stays None.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    stamp = value.strftime("%Y-%m-%dT%H:%M:%S")
    offset = value.utcoffset()
    if not offset:
        return stamp + "Z"

    total_minutes = int(offset.total_seconds()) // 60
    sign = "+" if total_minutes >= 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{stamp}{sign}{hours:02d}:{minutes:02d}"
