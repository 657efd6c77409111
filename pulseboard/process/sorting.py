"""Deterministic ordering of headline lists."""

from __future__ import annotations

from datetime import datetime

from pulseboard.models import HeadlineEvent

SORT_KEYS = ("probability", "date")
SORT_ORDERS = ("asc", "desc")

# Events without a timestamp sort as the oldest possible date.
_MISSING_DATE = datetime.min


def _date_key(event: HeadlineEvent) -> datetime:
    return event.published_at or _MISSING_DATE


def _probability_key(event: HeadlineEvent) -> float:
    return event.probability


_PRIMARY_KEYS = {
    "probability": _probability_key,
    "date": _date_key,
}


def sort_headlines(
    events: list[HeadlineEvent],
    sort_by: str = "date",
    order: str = "desc",
) -> list[HeadlineEvent]:
    """Return a new list ordered by ``sort_by`` in ``order``.

    Ties on the primary key are ordered by headline, then source, ascending
    in both directions. The input list is not modified.
    """
    if sort_by not in _PRIMARY_KEYS:
        raise ValueError(f"Unknown sort key '{sort_by}', expected one of {SORT_KEYS}")
    if order not in SORT_ORDERS:
        raise ValueError(f"Unknown sort order '{order}', expected one of {SORT_ORDERS}")

    # Two stable passes: tie-break first, then the primary key.
    ordered = sorted(events, key=lambda e: (e.headline, e.source))
    ordered.sort(key=_PRIMARY_KEYS[sort_by], reverse=(order == "desc"))
    return ordered
