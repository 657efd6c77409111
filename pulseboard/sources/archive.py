"""Remote archive tier: snapshot files published to a static host."""

from __future__ import annotations

from pulseboard.config import get_tier_config
from pulseboard.sources import register_tier
from pulseboard.sources.base import BaseTier


@register_tier("archive")
class ArchiveTier(BaseTier):
    """Fetch the last published snapshot files."""

    @property
    def name(self) -> str:
        return "archive"

    @property
    def settings(self) -> dict:
        return get_tier_config(self.config, "archive")

    @property
    def base_url(self) -> str:
        return str(self.settings["base_url"]).rstrip("/")

    def comic_url(self, cache_bust: int) -> str:
        """Published comic image, with a cache-busting query."""
        return f"{self.base_url}{self.settings['comic_path']}?v={cache_bust}"
