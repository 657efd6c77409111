"""Abstract base class for rendering surfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pulseboard.countdown import CountdownState
from pulseboard.views import DashboardView


class BaseSurface(ABC):
    """Receives computed view models; owns no pipeline logic."""

    def __init__(self, config: dict):
        self.config = config

    @property
    def settings(self) -> dict:
        return (self.config.get("render") or {}).get(self.name) or {}

    @abstractmethod
    async def render(self, view: DashboardView) -> bool:
        """Display a full dashboard refresh. Returns True on success."""
        ...

    @abstractmethod
    async def set_status(self, online: bool) -> bool:
        """Flip the online/offline indicator. Returns True on success."""
        ...

    async def show_countdown(self, state: CountdownState) -> bool:
        """Update the next-update countdown. Surfaces may ignore it."""
        return True

    @property
    @abstractmethod
    def name(self) -> str:
        """Surface name."""
        ...
