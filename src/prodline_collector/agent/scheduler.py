"""Fixed-interval scheduler fanning out one poller task per line."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable, Sequence

from prodline_collector.agent.config import CollectorConfig
from prodline_collector.agent.poller import LinePoller
from prodline_collector.ingestion.models import FileResult
from prodline_collector.processing.dedup import DuplicateChecker
from prodline_collector.processing.loss_time import LossTimeDeriver
from prodline_collector.processing.writer import StoreWriter
from prodline_collector.storage.database import Database
from prodline_collector.storage.repositories import LossTimeRepo, ProductionRepo

logger = logging.getLogger(__name__)


class Scheduler:
    """Polls all lines concurrently every ``poll_interval`` seconds."""

    def __init__(self, pollers: Sequence[LinePoller], poll_interval: float = 5.0) -> None:
        self._pollers = list(pollers)
        self._poll_interval = poll_interval

    @classmethod
    def from_config(
        cls,
        config: CollectorConfig,
        db: Database,
        clock: Callable[[], datetime] = datetime.now,
    ) -> Scheduler:
        production = ProductionRepo(db)
        deriver = LossTimeDeriver(production, LossTimeRepo(db))
        dedup = DuplicateChecker(production)
        writer = StoreWriter(production, deriver)
        pollers = [LinePoller.for_line(line, config, dedup, writer, clock) for line in config.lines]
        return cls(pollers, config.poll_interval)

    async def run_cycle(self, stop_event: asyncio.Event) -> list[FileResult]:
        """One cycle: every line polled concurrently, all joined."""
        outcomes = await asyncio.gather(
            *(poller.poll(stop_event) for poller in self._pollers),
            return_exceptions=True,
        )
        results: list[FileResult] = []
        for poller, outcome in zip(self._pollers, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("Line %s poll crashed: %s", poller.line.name, outcome)
                continue
            results.extend(outcome)
        return results

    async def run(self, stop_event: asyncio.Event) -> int:
        """Run cycles until ``stop_event`` is set. Returns the cycle count."""
        logger.info(
            "Polling %d lines every %gs",
            len(self._pollers),
            self._poll_interval,
        )
        cycles = 0
        while not stop_event.is_set():
            await self.run_cycle(stop_event)
            cycles += 1
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._poll_interval)
            except asyncio.TimeoutError:
                pass
        logger.info("Scheduler stopped after %d cycles", cycles)
        return cycles
