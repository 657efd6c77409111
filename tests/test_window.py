"""Tests for time/probability windows and top-event selection."""

from __future__ import annotations

from datetime import datetime, timedelta

from pulseboard.models import HeadlineEvent, MetricsSnapshot
from pulseboard.process.window import (
    WindowPolicy,
    classify_windows,
    reference_time,
    select_top_event,
)
from pulseboard.timeutil import localnow

NOW = datetime(2024, 1, 10, 12, 0, 0)


def test_relevant_event_within_five_days(make_event):
    event = make_event(probability=60, when=NOW - timedelta(days=4))
    windows = classify_windows([event], NOW)
    assert windows.relevant == [event]
    assert windows.all == [event]


def test_relevant_event_older_than_five_days_is_excluded(make_event):
    event = make_event(probability=60, when=NOW - timedelta(days=6))
    windows = classify_windows([event], NOW)
    assert windows.relevant == []
    assert windows.all == []


def test_low_probability_recent_event_only_in_all(make_event):
    event = make_event(probability=30, when=NOW - timedelta(days=1))
    windows = classify_windows([event], NOW)
    assert windows.relevant == []
    assert windows.all == [event]


def test_low_probability_older_than_two_days_is_excluded(make_event):
    event = make_event(probability=30, when=NOW - timedelta(days=3))
    windows = classify_windows([event], NOW)
    assert windows.relevant == []
    assert windows.all == []


def test_window_edges_are_inclusive(make_event):
    at_five_days = make_event("edge-high", probability=50, when=NOW - timedelta(days=5))
    at_two_days = make_event("edge-low", probability=49, when=NOW - timedelta(days=2))
    windows = classify_windows([at_five_days, at_two_days], NOW)
    assert windows.relevant == [at_five_days]
    assert windows.all == [at_five_days, at_two_days]


def test_events_without_timestamp_are_excluded(make_event):
    undated = make_event(probability=95)
    bad_date = HeadlineEvent("b", "Src", 95, datetime_iso="not-a-date")
    windows = classify_windows([undated, bad_date], NOW)
    assert windows.relevant == []
    assert windows.all == []


def test_classification_does_not_mutate_input(make_event):
    events = [
        make_event("a", 70, NOW - timedelta(hours=1)),
        make_event("b", 10, NOW - timedelta(days=4)),
    ]
    snapshot = list(events)
    windows = classify_windows(events, NOW)
    assert events == snapshot
    assert windows.all is not events


def test_custom_policy_thresholds(make_event):
    policy = WindowPolicy(relevant_min_probability=80, noise_max_age=timedelta(days=10))
    event = make_event(probability=70, when=NOW - timedelta(days=7))
    windows = classify_windows([event], NOW, policy)
    assert windows.relevant == []
    assert windows.all == [event]


def test_policy_from_config(sample_config):
    policy = WindowPolicy.from_config(sample_config)
    assert policy.relevant_max_age == timedelta(days=5)
    assert policy.top_event_max_age == timedelta(hours=24)
    assert policy.smoothing_window == 5


def test_top_event_picks_highest_probability_in_last_day(make_event):
    older_but_higher = make_event("old", 99, NOW - timedelta(hours=30))
    recent_high = make_event("recent", 80, NOW - timedelta(hours=2))
    recent_low = make_event("low", 40, NOW - timedelta(hours=1))
    top = select_top_event([older_but_higher, recent_low, recent_high], NOW)
    assert top is recent_high


def test_top_event_none_when_nothing_recent(make_event):
    events = [make_event("old", 90, NOW - timedelta(days=2)), make_event("undated", 90)]
    assert select_top_event(events, NOW) is None


def test_top_event_tie_prefers_most_recent_then_headline(make_event):
    earlier = make_event("Zulu", 75, NOW - timedelta(hours=5))
    later = make_event("Yankee", 75, NOW - timedelta(hours=1))
    same_time_a = make_event("Alpha", 75, NOW - timedelta(hours=1))
    assert select_top_event([earlier, later], NOW) is later
    assert select_top_event([later, same_time_a], NOW) is same_time_a
    assert select_top_event([same_time_a, later], NOW) is same_time_a


def test_reference_time_uses_metrics_last_updated():
    metrics = MetricsSnapshot(last_updated="2024-01-01 00:00:00")
    assert reference_time(metrics) == datetime(2024, 1, 1)


def test_reference_time_falls_back_to_wall_clock():
    before = localnow() - timedelta(seconds=5)
    for metrics in (None, MetricsSnapshot(), MetricsSnapshot(last_updated="garbage")):
        assert reference_time(metrics) >= before
