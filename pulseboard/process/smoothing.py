"""Chart series: raw probability points and their trailing rolling mean."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime

from pulseboard.models import HeadlineEvent
from pulseboard.process.window import WindowPolicy


@dataclass(frozen=True)
class ChartPoint:
    """One chart sample with its tooltip label."""

    x: datetime
    y: float
    label: str


@dataclass
class ChartSeries:
    raw: list[ChartPoint] = field(default_factory=list)
    smoothed: list[ChartPoint] = field(default_factory=list)
    show_raw: bool = True
    show_smoothed: bool = True


class RollingMean:
    """Trailing mean over the last ``window`` values, updated in O(1)."""

    def __init__(self, window: int = 5):
        if window < 1:
            raise ValueError("window must be at least 1")
        self.window = window
        self._values: deque[float] = deque()
        self._sum = 0.0

    def __len__(self) -> int:
        return len(self._values)

    def push(self, value: float) -> float:
        """Add a value and return the mean of the values currently held."""
        self._values.append(value)
        self._sum += value
        if len(self._values) > self.window:
            self._sum -= self._values.popleft()
        return self._sum / len(self._values)


def smooth(points: list[ChartPoint], window: int = 5) -> list[ChartPoint]:
    """Trailing rolling mean of ``points``, one output per input.

    The first ``window - 1`` outputs average over fewer points; each output
    is labelled with how many points it covers.
    """
    mean = RollingMean(window)
    smoothed = []
    for point in points:
        value = mean.push(point.y)
        smoothed.append(
            ChartPoint(x=point.x, y=value, label=f"Mean of last {len(mean)} pts"),
        )
    return smoothed


def build_chart_series(
    events: list[HeadlineEvent],
    policy: WindowPolicy | None = None,
    show_raw: bool = True,
    show_smoothed: bool = True,
) -> ChartSeries:
    """Raw and smoothed series for the probability chart.

    The chart window is anchored on the newest event timestamp rather than the
    snapshot time, and only includes events at or above the relevance threshold.
    """
    policy = policy or WindowPolicy()

    dated = [e for e in events if e.published_at is not None]
    if not dated:
        return ChartSeries(show_raw=show_raw, show_smoothed=show_smoothed)

    latest = max(e.published_at for e in dated)
    cutoff = latest - policy.relevant_max_age

    raw = sorted(
        (
            ChartPoint(x=e.published_at, y=e.probability, label=e.headline)
            for e in dated
            if e.probability >= policy.relevant_min_probability
            and e.published_at >= cutoff
        ),
        key=lambda p: p.x,
    )

    return ChartSeries(
        raw=raw,
        smoothed=smooth(raw, policy.smoothing_window),
        show_raw=show_raw,
        show_smoothed=show_smoothed,
    )
