"""Load and validate configuration from YAML with env var substitution."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import yaml

DEFAULT_ORIGIN = "file://"
LOCAL_API_PORT = 5000
LOCAL_API_DEFAULT = f"http://localhost:{LOCAL_API_PORT}"
DEPLOYMENT_SUBPATH = "/intelli.ai"
ARCHIVE_BASE_URL = (
    "https://raw.githubusercontent.com/FelixKras/intelli.ai/refs/heads/data"
)
LOOPBACK_HOSTS = ("localhost", "127.0.0.1")

TIER_DEFAULTS: dict[str, dict[str, Any]] = {
    "local": {
        "enabled": True,
        "base_url": "",
        "metrics_path": "/api/metrics",
        "headlines_path": "/api/headlines",
        "timeout": 10,
    },
    "archive": {
        "enabled": True,
        "base_url": ARCHIVE_BASE_URL,
        "metrics_path": "/metrics.json",
        "headlines_path": "/headlines.json",
        "comic_path": "/xkcd_comic.png",
        "timeout": 15,
    },
}


def _load_dotenv(path: str | Path = ".env") -> None:
    """Load a .env file into os.environ (without overwriting existing vars)."""
    env_path = Path(path)
    if not env_path.is_file():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("'\"")
            if key and key not in os.environ:
                os.environ[key] = value


def _resolve_env_vars(value: Any) -> Any:
    """Recursively resolve ${ENV_VAR} patterns in config values."""
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}")
        match = pattern.search(value)
        if match:
            env_key = match.group(1)
            env_val = os.environ.get(env_key, "")
            # A value that is exactly one reference takes the variable as-is
            if match.group(0) == value:
                return env_val
            return pattern.sub(lambda m: os.environ.get(m.group(1), ""), value)
        return value
    if isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env_vars(item) for item in value]
    return value


def load_config(path: str | Path = "config.yaml") -> dict[str, Any]:
    """Load config from YAML file and resolve environment variables."""
    _load_dotenv()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    return _resolve_env_vars(raw or {})


def _dashboard(config: dict) -> dict:
    return config.get("dashboard", {}) or {}


def get_origin(config: dict) -> str:
    """Origin URL the dashboard is considered to be served from."""
    return _dashboard(config).get("origin") or DEFAULT_ORIGIN


def is_local_origin(origin: str) -> bool:
    """True for file:// pages and loopback hosts."""
    parts = urlsplit(origin)
    return parts.scheme == "file" or (parts.hostname or "") in LOOPBACK_HOSTS


def resolve_api_base_url(origin: str) -> str:
    """Base URL of the local data API for a given page origin.

    An empty string means the API is served from the origin itself.
    """
    parts = urlsplit(origin)
    if parts.scheme == "file":
        return LOCAL_API_DEFAULT

    host = parts.hostname or ""
    if host in LOOPBACK_HOSTS:
        if parts.port == LOCAL_API_PORT:
            return ""
        return f"http://{host}:{LOCAL_API_PORT}"

    base = f"{parts.scheme}://{parts.netloc}"
    if parts.path.startswith(DEPLOYMENT_SUBPATH):
        base += DEPLOYMENT_SUBPATH
    return base


def get_environment(config: dict) -> str:
    """Return "local" or "deployed"."""
    env = str(_dashboard(config).get("environment", "auto")).lower()
    if env in ("local", "deployed"):
        return env
    return "local" if is_local_origin(get_origin(config)) else "deployed"


def get_tier_config(config: dict, tier: str) -> dict:
    """Tier settings merged over the built-in defaults."""
    merged = dict(TIER_DEFAULTS.get(tier, {}))
    merged.update((config.get("tiers") or {}).get(tier) or {})
    return merged


def get_local_base_url(config: dict) -> str:
    """Explicit local tier base URL, else the one implied by the origin."""
    configured = get_tier_config(config, "local").get("base_url")
    if configured:
        return configured.rstrip("/")
    origin = get_origin(config)
    resolved = resolve_api_base_url(origin)
    if resolved:
        return resolved
    parts = urlsplit(origin)
    return f"{parts.scheme}://{parts.netloc}"


def get_refresh_interval(config: dict) -> float:
    return float(_dashboard(config).get("refresh_interval_seconds", 10))


def get_countdown_tick(config: dict) -> float:
    return float(_dashboard(config).get("countdown_tick_seconds", 1))


def get_sort_settings(config: dict, bucket: str) -> tuple[str, str]:
    """(sort_by, order) for the "relevant" or "all" bucket."""
    cfg = (config.get("sorting") or {}).get(bucket) or {}
    return cfg.get("by", "date"), cfg.get("order", "desc")


def get_chart_toggles(config: dict) -> tuple[bool, bool]:
    cfg = config.get("chart") or {}
    return bool(cfg.get("show_raw", True)), bool(cfg.get("show_smoothed", True))


def get_active_surfaces(config: dict) -> list[str]:
    """Return list of enabled rendering surface names."""
    surfaces = config.get("render") or {}
    return [name for name, cfg in surfaces.items() if (cfg or {}).get("enabled", False)]


def get_log_path(config: dict) -> str:
    return (config.get("logging") or {}).get("path", "data/pulseboard.log")


def get_log_level(config: dict) -> str:
    return str((config.get("logging") or {}).get("level", "INFO")).upper()
