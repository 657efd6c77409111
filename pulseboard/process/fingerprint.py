"""Cheap change detection between consecutive snapshot pairs."""

from __future__ import annotations

from pulseboard.models import HeadlinesSnapshot, MetricsSnapshot

FINGERPRINT_DELIMITER = "|"


def _part(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def compute_fingerprint(
    metrics: MetricsSnapshot, headlines: HeadlinesSnapshot,
) -> str:
    """Fingerprint of a snapshot pair.

    Only timestamps, list lengths and the overall probability take part, so an
    in-place edit of a headline with unchanged counts is not detected.
    """
    return FINGERPRINT_DELIMITER.join([
        _part(metrics.last_updated),
        _part(headlines.last_updated),
        _part(len(headlines.current_headlines)),
        _part(len(headlines.history_headlines)),
        _part(headlines.overall_probability),
    ])


def has_changed(fingerprint: str, previous: str | None) -> bool:
    return fingerprint != previous
