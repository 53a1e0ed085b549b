"""Long-running service wrapper around the scheduler."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys

from prodline_collector.agent.config import CollectorConfig
from prodline_collector.agent.scheduler import Scheduler
from prodline_collector.storage.database import Database

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "") -> None:
    logging.basicConfig(
        level=(level or os.environ.get("PRODLINE_LOG_LEVEL", "INFO")).upper(),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


async def serve(config: CollectorConfig) -> None:
    """Run the scheduler until SIGINT/SIGTERM."""
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def shutdown() -> None:
        logger.info("Shutting down...")
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            signal.signal(sig, lambda s, f: loop.call_soon_threadsafe(shutdown))

    db = Database(config.database)
    try:
        db.initialize(line.table_name for line in config.lines)
        scheduler = Scheduler.from_config(config, db)
        await scheduler.run(stop_event)
    finally:
        db.close()
