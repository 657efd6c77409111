"""Map a probability to a severity band."""

from __future__ import annotations

from pulseboard.models import SeverityBand

# Lower bounds, highest first. A value on a boundary belongs to the higher band.
SEVERITY_THRESHOLDS: tuple[tuple[float, SeverityBand], ...] = (
    (85, SeverityBand.CRITICAL),
    (70, SeverityBand.HIGH),
    (55, SeverityBand.MEDIUM),
    (40, SeverityBand.LOW),
)


def classify_severity(probability: float) -> SeverityBand:
    for lower_bound, band in SEVERITY_THRESHOLDS:
        if probability >= lower_bound:
            return band
    return SeverityBand.INFO
