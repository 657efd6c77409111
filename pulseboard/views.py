"""Shape snapshots into display-ready view models for rendering surfaces."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime

from pulseboard.models import (
    HeadlineEvent,
    HeadlinesSnapshot,
    MetricsSnapshot,
    SeverityBand,
    StockQuote,
)
from pulseboard.process.severity import classify_severity
from pulseboard.process.smoothing import ChartSeries
from pulseboard.process.sorting import sort_headlines
from pulseboard.timeutil import parse_timestamp

MAX_JOKES = 5
NO_HEADLINES = "No headlines available"
NO_TOP_EVENT = "No headlines in the last 24 hours."
NO_JOKES = "No jokes generated yet."
NO_STOCKS = "Market closed or data unavailable"
PLACEHOLDER = "—"


@dataclass
class MetricsView:
    runtime: str
    articles_processed: str
    notifications_sent: str
    ingest_rate: str
    lag: str
    api_success_rate: str
    errors: str
    heartbeats_sent: str
    next_update: str
    backend_version: str
    analysis_model: str
    jokes_model: str
    last_data_update: str


@dataclass
class HeadlineCard:
    headline: str
    keywords: str
    probability: float
    probability_label: str
    severity: SeverityBand
    source: str
    source_type: str
    time: str


@dataclass
class HeadlineListView:
    cards: list[HeadlineCard] = field(default_factory=list)
    sort_by: str = "date"
    order: str = "desc"

    @property
    def count(self) -> int:
        return len(self.cards)

    @property
    def count_label(self) -> str:
        return f"{self.count} headlines"

    @property
    def empty_message(self) -> str | None:
        return None if self.cards else NO_HEADLINES


@dataclass
class TopEventView:
    populated: bool
    percent: str
    probability_label: str
    source: str
    headline: str
    time: str
    severity: SeverityBand


@dataclass
class StockCard:
    name: str
    market_state: str
    trend: str
    price: str
    change: str
    positive: bool


@dataclass
class DashboardView:
    """Everything a rendering surface needs for one refresh."""

    online: bool
    metrics: MetricsView
    top_event: TopEventView
    relevant: HeadlineListView
    all: HeadlineListView
    chart: ChartSeries
    jokes: list[str]
    stocks: list[StockCard]
    comic: str
    tier: str
    generation: int
    rendered_at: datetime
    jokes_message: str | None = None
    stocks_message: str | None = None


def _number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def pct(probability: float) -> str:
    """Whole-number percentage, rounding halves up."""
    return f"{math.floor(probability + 0.5)}%"


def format_duration(seconds: float | None) -> str:
    """HH:MM:SS; negative or missing durations show as zero."""
    if seconds is None or seconds < 0:
        return "00:00:00"
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_timestamp(value: str | None) -> str:
    """DD/MM/YYYY, HH:MM:SS; unparsable input is returned unchanged."""
    if not value:
        return "N/A"
    parsed = parse_timestamp(value)
    if parsed is None:
        return value
    return parsed.strftime("%d/%m/%Y, %H:%M:%S")


def format_countdown_seconds(seconds: float | None) -> str:
    if seconds is not None and seconds > 0:
        return f"{int(seconds // 60)}m {int(seconds % 60)}s"
    return "Soon"


def build_metrics_view(metrics: MetricsSnapshot) -> MetricsView:
    return MetricsView(
        runtime=format_duration(metrics.runtime_seconds),
        articles_processed=_number(metrics.articles_processed or 0),
        notifications_sent=_number(metrics.notifications_sent or 0),
        ingest_rate=f"{metrics.ingest_rate_per_min or 0:.2f}/min",
        lag="--" if metrics.lag_minutes is None else f"{metrics.lag_minutes:.1f}m",
        api_success_rate=f"{metrics.api_success_rate or 0:.1f}%",
        errors=_number(metrics.errors_encountered or 0),
        heartbeats_sent=_number(metrics.telegram_heartbeats_sent or 0),
        next_update=format_countdown_seconds(metrics.time_until_next_update_seconds),
        backend_version=f"v{metrics.version}" if metrics.version else "",
        analysis_model=metrics.analysis_model or "",
        jokes_model=metrics.jokes_model or "",
        last_data_update=format_timestamp(metrics.last_updated),
    )


def build_headline_card(event: HeadlineEvent) -> HeadlineCard:
    return HeadlineCard(
        headline=event.headline,
        keywords=event.keywords or "N/A",
        probability=event.probability,
        probability_label=f"{_number(event.probability)}%",
        severity=classify_severity(event.probability),
        source=event.source,
        source_type=event.source_type or "Unknown",
        time=format_timestamp(event.datetime_iso),
    )


def build_headline_list(
    events: list[HeadlineEvent], sort_by: str = "date", order: str = "desc",
) -> HeadlineListView:
    ordered = sort_headlines(events, sort_by, order)
    return HeadlineListView(
        cards=[build_headline_card(e) for e in ordered],
        sort_by=sort_by,
        order=order,
    )


def build_top_event_view(event: HeadlineEvent | None) -> TopEventView:
    if event is None:
        return TopEventView(
            populated=False,
            percent="--",
            probability_label=PLACEHOLDER,
            source=PLACEHOLDER,
            headline=NO_TOP_EVENT,
            time=PLACEHOLDER,
            severity=SeverityBand.INFO,
        )
    return TopEventView(
        populated=True,
        percent=pct(event.probability),
        probability_label=f"{_number(event.probability)}%",
        source=f"{event.source or PLACEHOLDER} ({event.source_type or 'Unknown'})",
        headline=event.headline,
        time=format_timestamp(event.datetime_iso),
        severity=classify_severity(event.probability),
    )


def build_stock_card(stock: StockQuote) -> StockCard:
    change = stock.change_percent or 0
    positive = change >= 0
    arrow = "↑" if positive else "↓"
    return StockCard(
        name=stock.company_name or stock.ticker or "N/A",
        market_state=stock.market_state or "UNKNOWN",
        trend=stock.expected_trend or "NEUTRAL",
        price=f"{stock.price:.2f}" if stock.price else "N/A",
        change=f"{arrow} {abs(change):.2f}%",
        positive=positive,
    )


def build_jokes(headlines: HeadlinesSnapshot, limit: int = MAX_JOKES) -> list[str]:
    return list(headlines.jokes[:limit])


def empty_state(items: list, message: str) -> str | None:
    """The placeholder text for an empty panel, None when it has content."""
    return None if items else message


def build_comic_ref(headlines: HeadlinesSnapshot, fallback_url: str) -> str:
    """Embedded comic payload when present, else the published image URL."""
    return headlines.xkcd_comic_base64 or fallback_url
