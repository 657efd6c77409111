"""Tests for severity classification."""

from __future__ import annotations

import pytest

from pulseboard.models import SeverityBand
from pulseboard.process.severity import classify_severity


@pytest.mark.parametrize(
    "probability,expected",
    [
        (100, SeverityBand.CRITICAL),
        (85, SeverityBand.CRITICAL),
        (84.999, SeverityBand.HIGH),
        (70, SeverityBand.HIGH),
        (69.9, SeverityBand.MEDIUM),
        (55, SeverityBand.MEDIUM),
        (54.5, SeverityBand.LOW),
        (40, SeverityBand.LOW),
        (39.99, SeverityBand.INFO),
        (0, SeverityBand.INFO),
    ],
)
def test_band_boundaries_are_closed_below(probability, expected):
    assert classify_severity(probability) is expected


def test_every_probability_maps_to_a_band():
    """Classification is total over the probability range."""
    for p in range(0, 101):
        assert classify_severity(p) in SeverityBand


def test_band_labels_and_classes():
    assert SeverityBand.CRITICAL.label == "Critical"
    assert SeverityBand.INFO.label == "Info"
    assert SeverityBand.HIGH.display_class == "severity-high"
