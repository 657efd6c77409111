"""Timestamp parsing shared by ingestion, windowing and formatting.

Snapshot timestamps without an offset are wall-clock times on the producer's
host, which is the dashboard's host too. Everything is compared as naive
local time.
"""

from __future__ import annotations

from datetime import datetime


def localnow() -> datetime:
    """Naive local wall-clock time, comparable with parsed snapshot timestamps."""
    return datetime.now()


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a snapshot timestamp, returning None when it is missing or invalid.

    Accepts "YYYY-MM-DD HH:MM:SS" (the producer's format) as well as ISO-8601
    with a "T" separator, fractional seconds, "Z" or an explicit offset.
    Aware values are converted to naive local time.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def epoch_ms(moment: datetime | None = None) -> int:
    """Milliseconds since the epoch, used as a cache-busting token.

    Naive moments are read as local time.
    """
    moment = moment or datetime.now()
    return int(moment.timestamp() * 1000)
