"""Plain-text dashboard written to stdout."""

from __future__ import annotations

import logging
import sys

from pulseboard.countdown import CountdownState
from pulseboard.render import register_surface
from pulseboard.render.base import BaseSurface
from pulseboard.views import DashboardView, HeadlineListView

logger = logging.getLogger(__name__)


@register_surface("console")
class ConsoleSurface(BaseSurface):
    """Print each refresh as a compact text report."""

    def __init__(self, config: dict, stream=None):
        super().__init__(config)
        self.stream = stream or sys.stdout

    @property
    def name(self) -> str:
        return "console"

    @property
    def max_cards(self) -> int:
        return int(self.settings.get("max_cards", 10))

    def _write(self, text: str) -> bool:
        try:
            print(text, file=self.stream, flush=True)
            return True
        except OSError:
            logger.exception("Failed to write to console")
            return False

    async def render(self, view: DashboardView) -> bool:
        return self._write(self.format_dashboard(view, self.max_cards))

    async def set_status(self, online: bool) -> bool:
        return self._write(f"[status] {'Online' if online else 'Offline'}")

    async def show_countdown(self, state: CountdownState) -> bool:
        if not self.settings.get("show_countdown", False):
            return True
        return self._write(f"[next update] {state.display()}")

    @staticmethod
    def _format_list(title: str, listing: HeadlineListView, max_cards: int) -> list[str]:
        lines = [f"{title} ({listing.count_label}, by {listing.sort_by} {listing.order})"]
        if listing.empty_message:
            lines.append(f"  {listing.empty_message}")
            return lines
        for card in listing.cards[:max_cards]:
            lines.append(
                f"  [{card.severity.label:<8}] {card.probability_label:>4} "
                f"{card.headline} ({card.source}, {card.time})"
            )
        hidden = listing.count - max_cards
        if hidden > 0:
            lines.append(f"  ... {hidden} more")
        return lines

    @staticmethod
    def format_dashboard(view: DashboardView, max_cards: int = 10) -> str:
        m = view.metrics
        top = view.top_event
        lines = [
            f"=== Dashboard ({'Online' if view.online else 'Offline'}, "
            f"tier={view.tier}, cycle #{view.generation}) ===",
            f"Runtime {m.runtime} | Articles {m.articles_processed} | "
            f"Notifications {m.notifications_sent} | Errors {m.errors}",
            f"Ingest {m.ingest_rate} | Lag {m.lag} | API {m.api_success_rate} | "
            f"Heartbeats {m.heartbeats_sent}",
            f"Next update {m.next_update} | Data updated {m.last_data_update} "
            f"{m.backend_version}".rstrip(),
            "",
            f"Top event: {top.percent} [{top.severity.label}] {top.headline}",
        ]
        if top.populated:
            lines.append(f"  {top.source} at {top.time}")
        lines.append("")
        lines.extend(ConsoleSurface._format_list("Relevant", view.relevant, max_cards))
        lines.extend(ConsoleSurface._format_list("All", view.all, max_cards))
        lines.append(
            f"Chart: {len(view.chart.raw)} raw / {len(view.chart.smoothed)} smoothed points"
        )
        if view.jokes:
            lines.append(f"Jokes: {len(view.jokes)}")
        elif view.jokes_message:
            lines.append(f"Jokes: {view.jokes_message}")
        if view.stocks_message:
            lines.append(f"Stocks: {view.stocks_message}")
        for stock in view.stocks:
            lines.append(
                f"  {stock.name} [{stock.market_state}] ${stock.price} {stock.change} "
                f"trend {stock.trend}"
            )
        return "\n".join(lines)
