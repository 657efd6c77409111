"""Tests for snapshot change detection."""

from __future__ import annotations

import dataclasses

from pulseboard.models import HeadlinesSnapshot, MetricsSnapshot
from pulseboard.process.fingerprint import compute_fingerprint, has_changed


def test_fingerprint_fields(snapshot_pair):
    fp = compute_fingerprint(snapshot_pair.metrics, snapshot_pair.headlines)
    assert fp == "2024-01-10 12:00:00|2024-01-10 11:59:30|2|3|72"


def test_fingerprint_of_empty_snapshots():
    assert compute_fingerprint(MetricsSnapshot(), HeadlinesSnapshot()) == "||0|0|"


def test_unrelated_fields_do_not_change_fingerprint(snapshot_pair):
    """Only timestamps, counts and overall probability are compared.

    Edits to a headline's content with unchanged counts go unnoticed.
    """
    metrics = dataclasses.replace(snapshot_pair.metrics, errors_encountered=999)
    edited = dataclasses.replace(
        snapshot_pair.headlines.current_headlines[0], headline="Edited text",
    )
    headlines = dataclasses.replace(
        snapshot_pair.headlines,
        current_headlines=(edited, *snapshot_pair.headlines.current_headlines[1:]),
        jokes=("different",),
    )
    before = compute_fingerprint(snapshot_pair.metrics, snapshot_pair.headlines)
    after = compute_fingerprint(metrics, headlines)
    assert before == after
    assert not has_changed(after, before)


def test_count_change_changes_fingerprint(snapshot_pair):
    headlines = dataclasses.replace(
        snapshot_pair.headlines,
        history_headlines=snapshot_pair.headlines.history_headlines[:1],
    )
    before = compute_fingerprint(snapshot_pair.metrics, snapshot_pair.headlines)
    after = compute_fingerprint(snapshot_pair.metrics, headlines)
    assert has_changed(after, before)


def test_first_fingerprint_always_changed():
    assert has_changed("a|b|0|0|", None)
