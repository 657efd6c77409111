"""Time/probability windows for the headline lists and the top-event card."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from pulseboard.models import HeadlineEvent, MetricsSnapshot
from pulseboard.timeutil import localnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowPolicy:
    """Thresholds that decide bucket membership."""

    relevant_min_probability: float = 50
    relevant_max_age: timedelta = timedelta(days=5)
    noise_max_age: timedelta = timedelta(days=2)
    top_event_max_age: timedelta = timedelta(hours=24)
    smoothing_window: int = 5

    @classmethod
    def from_config(cls, config: dict) -> WindowPolicy:
        cfg = config.get("windows", {}) or {}
        return cls(
            relevant_min_probability=cfg.get("relevant_min_probability", 50),
            relevant_max_age=timedelta(days=cfg.get("relevant_max_age_days", 5)),
            noise_max_age=timedelta(days=cfg.get("noise_max_age_days", 2)),
            top_event_max_age=timedelta(
                hours=cfg.get("top_event_max_age_hours", 24),
            ),
            smoothing_window=int(cfg.get("smoothing_window", 5)),
        )


@dataclass
class WindowedHeadlines:
    """The two display buckets. An event may appear in both."""

    relevant: list[HeadlineEvent] = field(default_factory=list)
    all: list[HeadlineEvent] = field(default_factory=list)


def reference_time(metrics: MetricsSnapshot | None) -> datetime:
    """Server time of the snapshot, or wall-clock time when it is unknown."""
    if metrics is not None:
        moment = metrics.last_updated_at
        if moment is not None:
            return moment
        if metrics.last_updated:
            logger.warning(
                "Unparsable metrics last_updated %r, using wall clock",
                metrics.last_updated,
            )
    return localnow()


def classify_windows(
    events: list[HeadlineEvent],
    now: datetime,
    policy: WindowPolicy | None = None,
) -> WindowedHeadlines:
    """Split events into the "relevant" and "all" buckets.

    relevant: probability >= threshold and at most ``relevant_max_age`` old.
    all: the relevant events, plus lower-probability events at most
    ``noise_max_age`` old. Events without a usable timestamp are left out.
    """
    policy = policy or WindowPolicy()
    relevant_cutoff = now - policy.relevant_max_age
    noise_cutoff = now - policy.noise_max_age

    windows = WindowedHeadlines()
    for event in events:
        published = event.published_at
        if published is None:
            continue
        if event.probability >= policy.relevant_min_probability:
            if published >= relevant_cutoff:
                windows.relevant.append(event)
                windows.all.append(event)
        elif published >= noise_cutoff:
            windows.all.append(event)

    return windows


def select_top_event(
    events: list[HeadlineEvent],
    now: datetime,
    policy: WindowPolicy | None = None,
) -> HeadlineEvent | None:
    """Highest-probability event within the top-event window.

    Equal probabilities go to the most recent event, then to the
    alphabetically first headline.
    """
    policy = policy or WindowPolicy()
    cutoff = now - policy.top_event_max_age

    top = None
    for event in events:
        published = event.published_at
        if published is None or published < cutoff:
            continue
        if top is None or _outranks(event, top):
            top = event
    return top


def _outranks(candidate: HeadlineEvent, current: HeadlineEvent) -> bool:
    if candidate.probability != current.probability:
        return candidate.probability > current.probability
    if candidate.published_at != current.published_at:
        return candidate.published_at > current.published_at
    return candidate.headline < current.headline
