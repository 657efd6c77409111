"""Rendering surface registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pulseboard.render.base import BaseSurface

SURFACES: dict[str, type[BaseSurface]] = {}


def register_surface(name: str):
    """Decorator to register a rendering surface."""

    def decorator(cls):
        SURFACES[name] = cls
        return cls

    return decorator


from pulseboard.render.console import ConsoleSurface  # noqa: E402, F401
from pulseboard.render.json_file import JsonFileSurface  # noqa: E402, F401
