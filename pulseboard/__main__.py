"""CLI entrypoint: python -m pulseboard {watch|once|check-sources}."""

from __future__ import annotations

import asyncio
import logging
import logging.handlers
import os
import sys
from pathlib import Path

import httpx

from pulseboard.config import (
    get_environment,
    get_log_level,
    get_log_path,
    get_origin,
    load_config,
)


def setup_logging(config: dict) -> None:
    """Configure logging with console + rotating file output."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, get_log_level(config), logging.INFO))

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Logs go to stderr so the console surface owns stdout
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(fmt)
    root.addHandler(console)

    # File handler (rotate at 5MB, keep 3 backups)
    log_file = Path(get_log_path(config))
    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.handlers.RotatingFileHandler(
        str(log_file), maxBytes=5 * 1024 * 1024, backupCount=3,
    )
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


logger = logging.getLogger("pulseboard")


async def cmd_watch(config: dict) -> None:
    """Refresh the dashboard until interrupted."""
    from pulseboard.pipeline import Pipeline

    pipeline = Pipeline(config)
    if not pipeline.surfaces:
        logger.warning("No rendering surfaces enabled; cycles will only be logged")
    logger.info(
        "Watching (origin=%s, environment=%s)",
        get_origin(config), get_environment(config),
    )
    await pipeline.run_forever()


async def cmd_once(config: dict) -> None:
    """Run a single refresh cycle."""
    from pulseboard.pipeline import CycleOutcome, Pipeline

    pipeline = Pipeline(config)
    outcome = await pipeline.run_cycle()
    pipeline.countdown.cancel()
    print(f"Cycle outcome: {outcome.value}")
    if outcome is CycleOutcome.FAILED:
        sys.exit(1)


async def cmd_check_sources(config: dict) -> None:
    """Probe every configured tier and report its statuses."""
    from pulseboard.sources import TIER_ORDER, TIERS
    from pulseboard.sources.base import TierError
    from pulseboard.timeutil import epoch_ms

    print(f"Environment: {get_environment(config)} (origin {get_origin(config)})")
    failed = 0
    async with httpx.AsyncClient(follow_redirects=True) as client:
        for name in TIER_ORDER:
            tier = TIERS[name](config)
            try:
                pair = await tier.fetch_pair(client, epoch_ms())
            except TierError as exc:
                failed += 1
                print(f"  {name:<8} FAIL  {exc.failure.describe()}")
                continue
            print(
                f"  {name:<8} OK    {tier.base_url} "
                f"(metrics updated {pair.metrics.last_updated or 'N/A'}, "
                f"{len(pair.headlines.combined())} headlines)"
            )

    if failed == len(TIER_ORDER):
        sys.exit(1)


COMMANDS = {
    "watch": cmd_watch,
    "once": cmd_once,
    "check-sources": cmd_check_sources,
}


def main() -> None:
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        available = ", ".join(COMMANDS)
        print(f"Usage: python -m pulseboard {{{available}}}")
        sys.exit(1)

    command = sys.argv[1]
    config = load_config(os.environ.get("CONFIG_PATH", "config.yaml"))
    setup_logging(config)
    handler = COMMANDS[command]

    try:
        asyncio.run(handler(config))
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
