"""Snapshot records consumed by the dashboard pipeline.

Payloads arrive as untyped JSON from either data tier. ``parse_metrics`` and
``parse_headlines`` are the ingestion boundary: they turn raw dicts into
immutable records, quarantine headline records that cannot be classified, and
reject payloads that are not JSON objects at all.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pulseboard.timeutil import parse_timestamp

logger = logging.getLogger(__name__)


class MalformedSnapshot(ValueError):
    """A payload that cannot be interpreted as a snapshot."""


class SeverityBand(Enum):
    """Discrete severity derived from a probability."""

    CRITICAL = ("Critical", "severity-critical")
    HIGH = ("High", "severity-high")
    MEDIUM = ("Medium", "severity-medium")
    LOW = ("Low", "severity-low")
    INFO = ("Info", "severity-info")

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def display_class(self) -> str:
        return self.value[1]


@dataclass(frozen=True)
class HeadlineEvent:
    """A single scored headline emitted by the producer."""

    headline: str
    source: str
    probability: float
    source_type: str | None = None
    keywords: str | None = None
    datetime_iso: str | None = None
    published_at: datetime | None = field(default=None, init=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "published_at", parse_timestamp(self.datetime_iso))


@dataclass(frozen=True)
class StockQuote:
    """Market card data for one ticker."""

    ticker: str | None = None
    company_name: str | None = None
    market_state: str | None = None
    expected_trend: str | None = None
    price: float | None = None
    change_percent: float | None = None


@dataclass(frozen=True)
class MetricsSnapshot:
    """Operational counters and gauges reported by the producer."""

    runtime_seconds: float | None = None
    articles_processed: float | None = None
    notifications_sent: float | None = None
    ingest_rate_per_min: float | None = None
    lag_minutes: float | None = None
    api_success_rate: float | None = None
    errors_encountered: float | None = None
    telegram_heartbeats_sent: float | None = None
    version: str | None = None
    last_updated: str | None = None
    next_update_time: str | None = None
    analysis_model: str | None = None
    jokes_model: str | None = None
    time_until_next_update_seconds: float | None = None

    @property
    def last_updated_at(self) -> datetime | None:
        return parse_timestamp(self.last_updated)

    @property
    def next_update_at(self) -> datetime | None:
        return parse_timestamp(self.next_update_time)


@dataclass(frozen=True)
class HeadlinesSnapshot:
    """Headline collections plus auxiliary dashboard content."""

    current_headlines: tuple[HeadlineEvent, ...] = ()
    history_headlines: tuple[HeadlineEvent, ...] = ()
    jokes: tuple[str, ...] = ()
    stocks: tuple[StockQuote, ...] = ()
    xkcd_comic_base64: str | None = None
    last_updated: str | None = None
    overall_probability: float | None = None
    quarantined: int = 0

    def combined(self) -> list[HeadlineEvent]:
        """Current headlines followed by history, as a fresh list."""
        return [*self.current_headlines, *self.history_headlines]


def _as_number(value: Any) -> float | None:
    """Coerce a JSON value to a finite number, or None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    if isinstance(number, float) and not math.isfinite(number):
        return None
    return number


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def parse_metrics(data: Any) -> MetricsSnapshot:
    """Build a MetricsSnapshot from a decoded JSON payload."""
    if not isinstance(data, dict):
        raise MalformedSnapshot(
            f"metrics payload must be an object, got {type(data).__name__}"
        )
    return MetricsSnapshot(
        runtime_seconds=_as_number(data.get("runtime_seconds")),
        articles_processed=_as_number(data.get("articles_processed")),
        notifications_sent=_as_number(data.get("notifications_sent")),
        ingest_rate_per_min=_as_number(data.get("ingest_rate_per_min")),
        lag_minutes=_as_number(data.get("lag_minutes")),
        api_success_rate=_as_number(data.get("api_success_rate")),
        errors_encountered=_as_number(data.get("errors_encountered")),
        telegram_heartbeats_sent=_as_number(data.get("telegram_heartbeats_sent")),
        version=_as_text(data.get("version")),
        last_updated=_as_text(data.get("last_updated")),
        next_update_time=_as_text(data.get("next_update_time")),
        analysis_model=_as_text(data.get("analysis_model")),
        jokes_model=_as_text(data.get("jokes_model")),
        time_until_next_update_seconds=_as_number(
            data.get("time_until_next_update_seconds"),
        ),
    )


def parse_headline(item: Any) -> HeadlineEvent | None:
    """Build a HeadlineEvent, or return None if the record must be quarantined."""
    if not isinstance(item, dict):
        return None

    probability = _as_number(item.get("probability"))
    if probability is None or not 0 <= probability <= 100:
        return None

    return HeadlineEvent(
        headline=_as_text(item.get("headline")) or "",
        source=_as_text(item.get("source")) or "",
        probability=probability,
        source_type=_as_text(item.get("source_type")),
        keywords=_as_text(item.get("keywords")),
        datetime_iso=_as_text(item.get("datetime_iso")),
    )


def _parse_headline_list(
    data: dict, key: str,
) -> tuple[tuple[HeadlineEvent, ...], int]:
    raw = data.get(key) or []
    if not isinstance(raw, list):
        logger.warning("Ignoring '%s': expected a list, got %s", key, type(raw).__name__)
        return (), 0

    events = []
    dropped = 0
    for item in raw:
        event = parse_headline(item)
        if event is None:
            dropped += 1
            continue
        events.append(event)

    if dropped:
        logger.warning(
            "Quarantined %d of %d records in '%s' (invalid probability)",
            dropped, len(raw), key,
        )
    return tuple(events), dropped


def _parse_jokes(data: dict) -> tuple[str, ...]:
    raw = data.get("jokes")
    if not raw:
        single = data.get("joke")
        raw = [single] if single else []
    if not isinstance(raw, list):
        return ()

    jokes = []
    for item in raw:
        if isinstance(item, dict):
            text = _as_text(item.get("joke"))
        else:
            text = _as_text(item)
        if text:
            jokes.append(text)
    return tuple(jokes)


def _parse_stocks(data: dict) -> tuple[StockQuote, ...]:
    raw = data.get("stocks") or []
    if not isinstance(raw, list):
        return ()

    stocks = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        meta = item.get("metadata") or {}
        if not isinstance(meta, dict):
            meta = {}
        stocks.append(
            StockQuote(
                ticker=_as_text(item.get("ticker")),
                company_name=_as_text(meta.get("company_name")),
                market_state=_as_text(meta.get("market_state")),
                expected_trend=_as_text(meta.get("expected_trend")),
                price=_as_number(meta.get("price")),
                change_percent=_as_number(meta.get("change_percent")),
            )
        )
    return tuple(stocks)


def parse_headlines(data: Any) -> HeadlinesSnapshot:
    """Build a HeadlinesSnapshot from a decoded JSON payload."""
    if not isinstance(data, dict):
        raise MalformedSnapshot(
            f"headlines payload must be an object, got {type(data).__name__}"
        )

    current, dropped_current = _parse_headline_list(data, "current_headlines")
    history, dropped_history = _parse_headline_list(data, "history_headlines")

    return HeadlinesSnapshot(
        current_headlines=current,
        history_headlines=history,
        jokes=_parse_jokes(data),
        stocks=_parse_stocks(data),
        xkcd_comic_base64=_as_text(data.get("xkcd_comic_base64")) or None,
        last_updated=_as_text(data.get("last_updated")),
        overall_probability=_as_number(data.get("overall_probability")),
        quarantined=dropped_current + dropped_history,
    )
