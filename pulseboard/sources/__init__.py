"""Data tier registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pulseboard.sources.base import BaseTier

TIERS: dict[str, type[BaseTier]] = {}

# Local-first, remote-archive fallback.
TIER_ORDER = ("local", "archive")


def register_tier(name: str):
    """Decorator to register a data tier."""

    def decorator(cls):
        TIERS[name] = cls
        return cls

    return decorator


# Import implementations to trigger registration
from pulseboard.sources.archive import ArchiveTier  # noqa: E402, F401
from pulseboard.sources.local import LocalApiTier  # noqa: E402, F401
