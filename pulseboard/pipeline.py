"""Pipeline orchestrator: one reconcile-and-render pass per refresh tick."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum

from pulseboard.config import (
    get_active_surfaces,
    get_chart_toggles,
    get_countdown_tick,
    get_refresh_interval,
    get_sort_settings,
)
from pulseboard.countdown import Countdown, CountdownState
from pulseboard.models import HeadlineEvent
from pulseboard.process.fingerprint import compute_fingerprint, has_changed
from pulseboard.process.smoothing import ChartSeries, build_chart_series
from pulseboard.process.window import (
    WindowedHeadlines,
    WindowPolicy,
    classify_windows,
    reference_time,
    select_top_event,
)
from pulseboard.render import SURFACES
from pulseboard.render.base import BaseSurface
from pulseboard.sources.archive import ArchiveTier
from pulseboard.sources.base import DataUnavailable, SnapshotPair
from pulseboard.sources.resolver import DataSourceResolver
from pulseboard.timeutil import epoch_ms, localnow
from pulseboard.views import (
    DashboardView,
    HeadlineListView,
    NO_JOKES,
    NO_STOCKS,
    build_comic_ref,
    build_headline_list,
    build_jokes,
    build_metrics_view,
    build_stock_card,
    build_top_event_view,
    empty_state,
)

logger = logging.getLogger(__name__)

BUCKETS = ("relevant", "all")


class PipelineStatus(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    RECONCILING = "reconciling"
    RENDERED = "rendered"
    FAILED = "failed"


class CycleOutcome(Enum):
    RENDERED = "rendered"
    UNCHANGED = "unchanged"
    FAILED = "failed"
    STALE = "stale"


@dataclass
class PipelineState:
    """Everything the orchestrator remembers between cycles."""

    status: PipelineStatus = PipelineStatus.IDLE
    generation: int = 0
    online: bool | None = None
    last_fingerprint: str | None = None
    last_outcome: CycleOutcome | None = None
    combined_headlines: list[HeadlineEvent] = field(default_factory=list)
    windows: WindowedHeadlines | None = None
    view: DashboardView | None = None
    sort: dict[str, tuple[str, str]] = field(default_factory=dict)
    show_raw: bool = True
    show_smoothed: bool = True


class Pipeline:
    """Fetch, reconcile and hand view models to the rendering surfaces.

    Each cycle takes a generation number when it starts. A cycle whose fetch
    completes after a newer cycle has started is discarded, so overlapping
    ticks can never overwrite newer state with older data.
    """

    def __init__(
        self,
        config: dict,
        resolver: DataSourceResolver | None = None,
        surfaces: list[BaseSurface] | None = None,
        state: PipelineState | None = None,
    ):
        self.config = config
        self.resolver = resolver or DataSourceResolver(config)
        if surfaces is None:
            surfaces = [
                SURFACES[name](config)
                for name in get_active_surfaces(config)
                if name in SURFACES
            ]
        self.surfaces = surfaces
        self.policy = WindowPolicy.from_config(config)
        self.state = state or self._initial_state()
        self.countdown = Countdown(
            self._broadcast_countdown, interval=get_countdown_tick(config),
        )

    def _initial_state(self) -> PipelineState:
        show_raw, show_smoothed = get_chart_toggles(self.config)
        return PipelineState(
            sort={bucket: get_sort_settings(self.config, bucket) for bucket in BUCKETS},
            show_raw=show_raw,
            show_smoothed=show_smoothed,
        )

    # --- Cycle ---

    async def run_cycle(self) -> CycleOutcome:
        state = self.state
        state.generation += 1
        generation = state.generation
        state.status = PipelineStatus.FETCHING

        try:
            try:
                pair = await self.resolver.resolve()
            except DataUnavailable as exc:
                if generation != state.generation:
                    logger.info("Discarding failure of superseded cycle #%d", generation)
                    return self._finish(CycleOutcome.STALE)
                logger.error("Cycle #%d: %s", generation, exc)
                state.status = PipelineStatus.FAILED
                await self._set_online(False)
                return self._finish(CycleOutcome.FAILED)

            if generation != state.generation:
                logger.info(
                    "Discarding cycle #%d result, cycle #%d is newer",
                    generation, state.generation,
                )
                return self._finish(CycleOutcome.STALE)

            state.status = PipelineStatus.RECONCILING
            fingerprint = compute_fingerprint(pair.metrics, pair.headlines)
            if not has_changed(fingerprint, state.last_fingerprint):
                logger.debug("Cycle #%d: no new data (%s)", generation, fingerprint)
                if state.online is False:
                    await self._set_online(True)
                return self._finish(CycleOutcome.UNCHANGED)

            view = self.reconcile(pair, generation)
            state.last_fingerprint = fingerprint
            state.online = True
            await self._render(view)
            self._schedule_countdown(pair)
            state.status = PipelineStatus.RENDERED
            logger.info(
                "Cycle #%d rendered from '%s': %d relevant, %d total headlines",
                generation, pair.tier, view.relevant.count, view.all.count,
            )
            return self._finish(CycleOutcome.RENDERED)
        finally:
            if generation == state.generation:
                state.status = PipelineStatus.IDLE

    def _finish(self, outcome: CycleOutcome) -> CycleOutcome:
        self.state.last_outcome = outcome
        return outcome

    def reconcile(self, pair: SnapshotPair, generation: int) -> DashboardView:
        """Window, rank and smooth a snapshot pair into a dashboard view."""
        state = self.state
        combined = pair.headlines.combined()
        now = reference_time(pair.metrics)

        windows = classify_windows(combined, now, self.policy)
        top = select_top_event(combined, now, self.policy)

        relevant_by, relevant_order = state.sort["relevant"]
        all_by, all_order = state.sort["all"]
        jokes = build_jokes(pair.headlines)
        stocks = [build_stock_card(s) for s in pair.headlines.stocks]
        comic_fallback = ArchiveTier(self.config).comic_url(epoch_ms())

        view = DashboardView(
            online=True,
            metrics=build_metrics_view(pair.metrics),
            top_event=build_top_event_view(top),
            relevant=build_headline_list(windows.relevant, relevant_by, relevant_order),
            all=build_headline_list(windows.all, all_by, all_order),
            chart=self._chart(combined),
            jokes=jokes,
            stocks=stocks,
            comic=build_comic_ref(pair.headlines, comic_fallback),
            tier=pair.tier,
            generation=generation,
            rendered_at=localnow(),
            jokes_message=empty_state(jokes, NO_JOKES),
            stocks_message=empty_state(stocks, NO_STOCKS),
        )
        state.combined_headlines = combined
        state.windows = windows
        state.view = view
        return view

    def _chart(self, headlines: list[HeadlineEvent]) -> ChartSeries:
        return build_chart_series(
            headlines,
            self.policy,
            show_raw=self.state.show_raw,
            show_smoothed=self.state.show_smoothed,
        )

    # --- Interactive updates from cached state ---

    async def resort(
        self, bucket: str, sort_by: str, order: str,
    ) -> HeadlineListView | None:
        """Re-sort one bucket of the current view without fetching."""
        if bucket not in BUCKETS:
            raise ValueError(f"Unknown bucket '{bucket}', expected one of {BUCKETS}")

        state = self.state
        state.sort[bucket] = (sort_by, order)
        if state.windows is None or state.view is None:
            return None

        listing = build_headline_list(getattr(state.windows, bucket), sort_by, order)
        state.view = dataclasses.replace(state.view, **{bucket: listing})
        await self._render(state.view)
        return listing

    async def toggle_chart(
        self, show_raw: bool, show_smoothed: bool,
    ) -> ChartSeries | None:
        """Rebuild the chart from the cached headline list."""
        state = self.state
        state.show_raw = show_raw
        state.show_smoothed = show_smoothed
        if not state.combined_headlines or state.view is None:
            return None

        chart = self._chart(state.combined_headlines)
        state.view = dataclasses.replace(state.view, chart=chart)
        await self._render(state.view)
        return chart

    # --- Surface fan-out ---

    async def _render(self, view: DashboardView) -> None:
        for surface in self.surfaces:
            try:
                if not await surface.render(view):
                    logger.error("Render failed on surface '%s'", surface.name)
            except Exception:
                logger.exception("Render error on surface '%s'", surface.name)

    async def _set_online(self, online: bool) -> None:
        self.state.online = online
        for surface in self.surfaces:
            try:
                await surface.set_status(online)
            except Exception:
                logger.exception("Status update error on surface '%s'", surface.name)

    async def _broadcast_countdown(self, countdown: CountdownState) -> None:
        for surface in self.surfaces:
            try:
                await surface.show_countdown(countdown)
            except Exception:
                logger.exception("Countdown error on surface '%s'", surface.name)

    def _schedule_countdown(self, pair: SnapshotPair) -> None:
        target = pair.metrics.next_update_at
        if target is None:
            self.countdown.cancel()
            return
        self.countdown.start(target)

    # --- Refresh loop ---

    async def run_forever(self, max_cycles: int | None = None) -> None:
        """Start a cycle every refresh interval, regardless of fetch latency."""
        interval = get_refresh_interval(self.config)
        pending: set[asyncio.Task] = set()
        started = 0
        logger.info("Refreshing every %.1fs", interval)

        try:
            while max_cycles is None or started < max_cycles:
                task = asyncio.create_task(self.run_cycle())
                pending.add(task)
                task.add_done_callback(pending.discard)
                task.add_done_callback(_log_cycle_error)
                started += 1
                if max_cycles is not None and started >= max_cycles:
                    break
                await asyncio.sleep(interval)
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
        finally:
            for task in list(pending):
                task.cancel()
            self.countdown.cancel()


def _log_cycle_error(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Refresh cycle crashed", exc_info=exc)
