"""Base class and error types for data tiers."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx

from pulseboard.models import (
    HeadlinesSnapshot,
    MetricsSnapshot,
    parse_headlines,
    parse_metrics,
)


@dataclass(frozen=True)
class TierFailure:
    """Why one tier could not serve a cycle."""

    tier: str
    base_url: str
    metrics_status: int | str | None
    headlines_status: int | str | None
    reason: str

    def describe(self) -> str:
        return (
            f"{self.tier} ({self.base_url}): {self.reason} "
            f"[metrics={self.metrics_status}, headlines={self.headlines_status}]"
        )


class TierError(Exception):
    """A tier failed to return a complete snapshot pair."""

    def __init__(self, failure: TierFailure):
        super().__init__(failure.describe())
        self.failure = failure


class TransportError(TierError):
    """A request failed inside the HTTP client (connection, timeout, redirects, decoding)."""


class ResponseError(TierError):
    """A response arrived but was unsuccessful or unreadable."""


class DataUnavailable(Exception):
    """Every eligible tier failed for this cycle."""

    def __init__(self, failures: list[TierFailure]):
        self.failures = list(failures)
        detail = "; ".join(f.describe() for f in self.failures) or "no tiers enabled"
        super().__init__(f"No data tier could serve snapshots: {detail}")


@dataclass(frozen=True)
class SnapshotPair:
    """Metrics and headlines fetched together from one tier."""

    metrics: MetricsSnapshot
    headlines: HeadlinesSnapshot
    tier: str


def _status_of(result: httpx.Response | BaseException) -> int | str:
    if isinstance(result, httpx.Response):
        return result.status_code
    return type(result).__name__


class BaseTier(ABC):
    """A provider of metrics + headlines snapshots."""

    def __init__(self, config: dict):
        self.config = config

    @property
    @abstractmethod
    def name(self) -> str:
        """Tier name."""
        ...

    @property
    @abstractmethod
    def base_url(self) -> str:
        ...

    @property
    @abstractmethod
    def settings(self) -> dict:
        """Tier section of the config, with defaults applied."""
        ...

    @property
    def metrics_url(self) -> str:
        return self.base_url + self.settings["metrics_path"]

    @property
    def headlines_url(self) -> str:
        return self.base_url + self.settings["headlines_path"]

    @property
    def timeout(self) -> float:
        return float(self.settings.get("timeout", 10))

    def _failure(self, metrics_status, headlines_status, reason: str) -> TierFailure:
        return TierFailure(
            tier=self.name,
            base_url=self.base_url,
            metrics_status=metrics_status,
            headlines_status=headlines_status,
            reason=reason,
        )

    async def fetch_pair(
        self, client: httpx.AsyncClient, cache_bust: int,
    ) -> SnapshotPair:
        """Fetch both resources concurrently; both must succeed."""
        params = {"v": str(cache_bust)}
        results = await asyncio.gather(
            client.get(self.metrics_url, params=params, timeout=self.timeout),
            client.get(self.headlines_url, params=params, timeout=self.timeout),
            return_exceptions=True,
        )
        metrics_resp, headlines_resp = results
        metrics_status = _status_of(metrics_resp)
        headlines_status = _status_of(headlines_resp)

        for result in results:
            if isinstance(result, httpx.HTTPError):
                reason = str(result) or type(result).__name__
                raise TransportError(
                    self._failure(metrics_status, headlines_status, reason),
                )
            if isinstance(result, BaseException):
                raise result

        if not (metrics_resp.is_success and headlines_resp.is_success):
            raise ResponseError(
                self._failure(metrics_status, headlines_status, "unsuccessful response"),
            )

        try:
            metrics = parse_metrics(metrics_resp.json())
            headlines = parse_headlines(headlines_resp.json())
        except ValueError as exc:
            # Covers JSON decode errors and MalformedSnapshot
            raise ResponseError(
                self._failure(metrics_status, headlines_status, f"malformed payload: {exc}"),
            ) from exc

        return SnapshotPair(metrics=metrics, headlines=headlines, tier=self.name)
