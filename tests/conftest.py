"""Shared test fixtures."""

from __future__ import annotations

import os
import time

import pytest

from pulseboard.config import load_config
from pulseboard.models import HeadlineEvent, parse_headlines, parse_metrics
from pulseboard.sources.base import SnapshotPair


@pytest.fixture
def sample_config(tmp_path):
    """Minimal config for testing (no real endpoints)."""
    config_text = """
dashboard:
  origin: "http://localhost:8080/"
  environment: auto
  refresh_interval_seconds: 0.01
  countdown_tick_seconds: 0.01

tiers:
  local:
    enabled: true
    base_url: "http://local.test"
  archive:
    enabled: true
    base_url: "https://archive.test/data"

windows:
  relevant_min_probability: 50
  relevant_max_age_days: 5
  noise_max_age_days: 2
  top_event_max_age_hours: 24
  smoothing_window: 5

sorting:
  relevant: { by: probability, order: desc }

render:
  json_file:
    enabled: true
    path: "JSON_PATH_PLACEHOLDER"

logging:
  path: "LOG_PATH_PLACEHOLDER"
"""
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        config_text
        .replace("JSON_PATH_PLACEHOLDER", str(tmp_path / "dashboard.json"))
        .replace("LOG_PATH_PLACEHOLDER", str(tmp_path / "pulseboard.log"))
    )
    return load_config(str(cfg_path))


@pytest.fixture
def metrics_payload():
    """Metrics JSON as served by the producer."""
    return {
        "runtime_seconds": 3725,
        "articles_processed": 1520,
        "notifications_sent": 12,
        "ingest_rate_per_min": 4.256,
        "lag_minutes": 2.34,
        "api_success_rate": 99.5,
        "errors_encountered": 3,
        "telegram_heartbeats_sent": 48,
        "version": "2.4.0",
        "last_updated": "2024-01-10 12:00:00",
        "next_update_time": "2024-01-10 12:15:00",
        "analysis_model": "analysis-large",
        "jokes_model": "jokes-small",
        "time_until_next_update_seconds": 754,
    }


@pytest.fixture
def headlines_payload():
    """Headlines JSON relative to a server time of 2024-01-10 12:00:00."""
    return {
        "last_updated": "2024-01-10 11:59:30",
        "overall_probability": 72,
        "current_headlines": [
            {
                "headline": "Border clashes escalate overnight",
                "source": "Wire A",
                "source_type": "rss",
                "probability": 88,
                "keywords": "border, clashes",
                "datetime_iso": "2024-01-10 06:00:00",
            },
            {
                "headline": "Talks resume in capital",
                "source": "Wire B",
                "source_type": "telegram",
                "probability": 35,
                "datetime_iso": "2024-01-09 18:00:00",
            },
        ],
        "history_headlines": [
            {
                "headline": "Troop movements reported",
                "source": "Wire C",
                "probability": 64,
                "datetime_iso": "2024-01-07 09:00:00",
            },
            {
                "headline": "Minor incident at crossing",
                "source": "Wire D",
                "probability": 20,
                "datetime_iso": "2024-01-06 09:00:00",
            },
            {
                "headline": "Undated bulletin",
                "source": "Wire E",
                "probability": 90,
            },
        ],
        "jokes": [{"joke": "One"}, "Two"],
        "stocks": [
            {
                "ticker": "ACME",
                "metadata": {
                    "company_name": "Acme Corp",
                    "market_state": "REGULAR",
                    "expected_trend": "UP",
                    "price": 101.5,
                    "change_percent": -1.234,
                },
            }
        ],
    }


@pytest.fixture
def snapshot_pair(metrics_payload, headlines_payload):
    return SnapshotPair(
        metrics=parse_metrics(metrics_payload),
        headlines=parse_headlines(headlines_payload),
        tier="local",
    )


@pytest.fixture
def make_event():
    """Factory for HeadlineEvents timestamped from a datetime."""

    def _make(headline="Event", probability=60.0, when=None, source="Src", **kwargs):
        datetime_iso = when.strftime("%Y-%m-%d %H:%M:%S") if when is not None else None
        return HeadlineEvent(
            headline=headline,
            source=source,
            probability=probability,
            datetime_iso=datetime_iso,
            **kwargs,
        )

    return _make


@pytest.fixture
def jerusalem_tz():
    """Run the test with the process local time zone set to UTC+2/+3."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "Asia/Jerusalem"
    time.tzset()
    yield
    if previous is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = previous
    time.tzset()
