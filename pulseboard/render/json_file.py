"""Write each refresh as a JSON document for a static front end."""

from __future__ import annotations

import dataclasses
import json
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pulseboard.countdown import CountdownState
from pulseboard.render import register_surface
from pulseboard.render.base import BaseSurface
from pulseboard.views import DashboardView, HeadlineListView

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    if isinstance(value, HeadlineListView):
        return {
            "cards": [_jsonable(c) for c in value.cards],
            "sort_by": value.sort_by,
            "order": value.order,
            "count": value.count,
            "count_label": value.count_label,
            "empty_message": value.empty_message,
        }
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: _jsonable(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, Enum):
        return {"label": value.label, "class": value.display_class}
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def dashboard_to_dict(view: DashboardView) -> dict:
    return _jsonable(view)


@register_surface("json_file")
class JsonFileSurface(BaseSurface):
    """Maintain a dashboard.json that a static page can poll."""

    @property
    def name(self) -> str:
        return "json_file"

    @property
    def path(self) -> Path:
        return Path(self.settings.get("path", "data/dashboard.json"))

    def _update(self, changes: dict) -> bool:
        path = self.path
        try:
            document = {}
            if path.is_file():
                document = json.loads(path.read_text())
            document.update(changes)
            dashboard = document.get("dashboard")
            if "online" in changes and isinstance(dashboard, dict):
                dashboard["online"] = changes["online"]
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(path.suffix + ".tmp")
            tmp.write_text(json.dumps(document, indent=2, ensure_ascii=False))
            tmp.replace(path)
            return True
        except (OSError, ValueError):
            logger.exception("Failed to write dashboard JSON to %s", path)
            return False

    async def render(self, view: DashboardView) -> bool:
        ok = self._update({"dashboard": dashboard_to_dict(view), "online": view.online})
        if ok:
            logger.debug("Wrote dashboard cycle #%d to %s", view.generation, self.path)
        return ok

    async def set_status(self, online: bool) -> bool:
        return self._update({"online": online})

    async def show_countdown(self, state: CountdownState) -> bool:
        return self._update({"next_update": state.display()})
