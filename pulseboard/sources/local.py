"""Local producer API tier (the service running beside the dashboard)."""

from __future__ import annotations

from pulseboard.config import get_local_base_url, get_tier_config
from pulseboard.sources import register_tier
from pulseboard.sources.base import BaseTier


@register_tier("local")
class LocalApiTier(BaseTier):
    """Fetch live snapshots from the producer's HTTP API."""

    @property
    def name(self) -> str:
        return "local"

    @property
    def settings(self) -> dict:
        return get_tier_config(self.config, "local")

    @property
    def base_url(self) -> str:
        return get_local_base_url(self.config)
