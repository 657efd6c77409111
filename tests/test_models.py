"""Tests for snapshot parsing at the ingestion boundary."""

from __future__ import annotations

from datetime import datetime

import pytest

from pulseboard.models import (
    HeadlineEvent,
    MalformedSnapshot,
    parse_headline,
    parse_headlines,
    parse_metrics,
)
from pulseboard.timeutil import parse_timestamp


def test_parse_metrics(metrics_payload):
    metrics = parse_metrics(metrics_payload)
    assert metrics.runtime_seconds == 3725
    assert metrics.version == "2.4.0"
    assert metrics.last_updated_at == datetime(2024, 1, 10, 12, 0, 0)
    assert metrics.next_update_at == datetime(2024, 1, 10, 12, 15, 0)


def test_parse_metrics_coerces_bad_numbers_to_none():
    metrics = parse_metrics({"lag_minutes": "n/a", "errors_encountered": True,
                             "api_success_rate": float("nan"), "runtime_seconds": "12.5"})
    assert metrics.lag_minutes is None
    assert metrics.errors_encountered is None
    assert metrics.api_success_rate is None
    assert metrics.runtime_seconds == 12.5


@pytest.mark.parametrize("payload", [None, [], "text", 42])
def test_non_object_payloads_are_rejected(payload):
    with pytest.raises(MalformedSnapshot):
        parse_metrics(payload)
    with pytest.raises(MalformedSnapshot):
        parse_headlines(payload)


def test_parse_headlines(headlines_payload):
    snapshot = parse_headlines(headlines_payload)
    assert len(snapshot.current_headlines) == 2
    assert len(snapshot.history_headlines) == 3
    assert snapshot.overall_probability == 72
    assert snapshot.jokes == ("One", "Two")
    assert snapshot.stocks[0].company_name == "Acme Corp"
    assert snapshot.stocks[0].change_percent == -1.234
    assert snapshot.quarantined == 0


def test_combined_is_current_then_history(headlines_payload):
    snapshot = parse_headlines(headlines_payload)
    combined = snapshot.combined()
    assert [e.headline for e in combined][:3] == [
        "Border clashes escalate overnight",
        "Talks resume in capital",
        "Troop movements reported",
    ]
    combined.clear()
    assert len(snapshot.combined()) == 5


def test_duplicates_are_kept():
    record = {"headline": "Same", "source": "S", "probability": 50,
              "datetime_iso": "2024-01-01 00:00:00"}
    snapshot = parse_headlines({"current_headlines": [record, record],
                                "history_headlines": [record]})
    assert len(snapshot.combined()) == 3


@pytest.mark.parametrize("probability", [None, "high", -1, 100.5, float("nan"), True])
def test_unclassifiable_probabilities_are_quarantined(probability):
    assert parse_headline({"headline": "x", "source": "y", "probability": probability}) is None


def test_quarantine_is_counted():
    snapshot = parse_headlines({
        "current_headlines": [
            {"headline": "ok", "source": "s", "probability": 55},
            {"headline": "bad", "source": "s", "probability": 140},
            "not a record",
        ],
        "history_headlines": "not a list",
    })
    assert [e.headline for e in snapshot.current_headlines] == ["ok"]
    assert snapshot.history_headlines == ()
    assert snapshot.quarantined == 2


def test_invalid_timestamp_keeps_literal():
    event = HeadlineEvent("h", "s", 60, datetime_iso="yesterday-ish")
    assert event.datetime_iso == "yesterday-ish"
    assert event.published_at is None


def test_events_are_immutable():
    event = HeadlineEvent("h", "s", 60)
    with pytest.raises(AttributeError):
        event.probability = 10


def test_legacy_single_joke():
    snapshot = parse_headlines({"joke": "Only one"})
    assert snapshot.jokes == ("Only one",)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2024-01-01 00:00:00", datetime(2024, 1, 1)),
        ("2024-01-01T06:30:00", datetime(2024, 1, 1, 6, 30)),
        ("", None),
        (None, None),
        ("01/02/2024", None),
    ],
)
def test_parse_timestamp(value, expected):
    assert parse_timestamp(value) == expected


@pytest.mark.parametrize(
    "value",
    ["2024-01-01T06:30:00Z", "2024-01-01T08:30:00+02:00", "2024-01-01T01:30:00-05:00"],
)
def test_parse_timestamp_converts_offsets_to_local_time(jerusalem_tz, value):
    # Jerusalem is UTC+2 in January
    assert parse_timestamp(value) == datetime(2024, 1, 1, 8, 30)


def test_parse_timestamp_keeps_naive_values_as_local(jerusalem_tz):
    assert parse_timestamp("2024-01-01 08:30:00") == datetime(2024, 1, 1, 8, 30)
