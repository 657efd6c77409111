"""Pick the data tier for a refresh cycle, falling back local → archive."""

from __future__ import annotations

import logging
from typing import Callable

import httpx

from pulseboard.config import get_environment, get_tier_config
from pulseboard.sources import TIER_ORDER, TIERS
from pulseboard.sources.base import (
    BaseTier,
    DataUnavailable,
    SnapshotPair,
    TierError,
)
from pulseboard.timeutil import epoch_ms

logger = logging.getLogger(__name__)


class DataSourceResolver:
    """Fetch a complete snapshot pair from the first tier that can serve one.

    The local tier is only tried when the dashboard runs in a local
    environment. A pair always comes from a single tier.
    """

    def __init__(
        self,
        config: dict,
        tiers: list[BaseTier] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], int] = epoch_ms,
    ):
        self.config = config
        self._tiers = tiers
        self._transport = transport
        self._clock = clock

    def eligible_tiers(self) -> list[BaseTier]:
        """Tiers to try, in order, for the current environment."""
        if self._tiers is not None:
            return list(self._tiers)

        environment = get_environment(self.config)
        tiers = []
        for name in TIER_ORDER:
            if name == "local" and environment != "local":
                continue
            if not get_tier_config(self.config, name).get("enabled", True):
                continue
            tiers.append(TIERS[name](self.config))
        return tiers

    async def resolve(self) -> SnapshotPair:
        tiers = self.eligible_tiers()
        failures = []
        cache_bust = self._clock()

        async with httpx.AsyncClient(
            transport=self._transport, follow_redirects=True,
        ) as client:
            for tier in tiers:
                try:
                    pair = await tier.fetch_pair(client, cache_bust)
                except TierError as exc:
                    logger.warning("Tier '%s' failed: %s", tier.name, exc)
                    failures.append(exc.failure)
                    continue

                logger.info(
                    "Fetched snapshots from '%s' (%d current, %d history headlines)",
                    tier.name,
                    len(pair.headlines.current_headlines),
                    len(pair.headlines.history_headlines),
                )
                return pair

        logger.error("All data tiers failed (%d tried)", len(tiers))
        raise DataUnavailable(failures)
