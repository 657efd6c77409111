"""Countdown to the producer's next scheduled update."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from pulseboard.timeutil import localnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CountdownState:
    minutes: int
    seconds: int
    due: bool = False

    def display(self) -> str:
        if self.due:
            return "Soon"
        return f"{self.minutes}m {self.seconds}s"


DUE_NOW = CountdownState(minutes=0, seconds=0, due=True)


class Countdown:
    """At most one active countdown; starting a new one replaces the old.

    ``on_tick`` receives a CountdownState every ``interval`` seconds while
    time remains, then a final due state, after which ticking stops. It may
    be a plain function or a coroutine function.
    """

    def __init__(
        self,
        on_tick: Callable[[CountdownState], Any],
        interval: float = 1.0,
        clock: Callable[[], datetime] = localnow,
    ):
        self.on_tick = on_tick
        self.interval = interval
        self._clock = clock
        self._task: asyncio.Task | None = None
        self.target: datetime | None = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, target: datetime) -> None:
        self.cancel()
        self.target = target
        self._task = asyncio.create_task(self._run(target))

    def cancel(self) -> None:
        if self.active:
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Block until the current countdown reaches its due state."""
        if self._task is not None:
            await self._task

    def remaining(self, target: datetime) -> CountdownState:
        seconds_left = (target - self._clock()).total_seconds()
        if seconds_left <= 0:
            return DUE_NOW
        minutes, seconds = divmod(int(seconds_left), 60)
        return CountdownState(minutes=minutes, seconds=seconds)

    async def _run(self, target: datetime) -> None:
        while True:
            state = self.remaining(target)
            result = self.on_tick(state)
            if asyncio.iscoroutine(result):
                await result
            if state.due:
                logger.debug("Countdown to %s reached", target)
                return
            await asyncio.sleep(self.interval)
