"""Loss-time derivation from the two latest records of a line.

The gap between two consecutive production events, minus the standard unit
time of the newer event, approximates how long the machine stood idle.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from prodline_collector.ingestion.models import LossTimeEntry, StoredRecord
from prodline_collector.storage.repositories import LossTimeRepo, ProductionRepo

logger = logging.getLogger(__name__)


def compute_loss_entry(
    machine: str,
    current: StoredRecord,
    previous: StoredRecord,
) -> Optional[LossTimeEntry]:
    """Apply the loss rule to a (current, previous) pair.

    Returns None when the machine ran within its unit time.
    """
    diff = (current.timestamp - previous.timestamp).total_seconds()
    net_loss = diff - current.sut
    if net_loss <= 0:
        return None
    return LossTimeEntry(
        loss_date=current.timestamp.date(),
        machine=machine,
        start_time=previous.timestamp.time(),
        loss_seconds=int(net_loss),
        end_time=current.timestamp,
    )


class LossTimeDeriver:
    """Persists at most one loss entry per (machine, end timestamp)."""

    def __init__(self, production_repo: ProductionRepo, loss_repo: LossTimeRepo) -> None:
        self._production = production_repo
        self._loss = loss_repo

    def derive_sync(self, table: str) -> Optional[LossTimeEntry]:
        """Derive and store the entry for ``table``. Returns what was inserted."""
        latest = self._production.latest_two(table)
        if len(latest) < 2:
            return None

        current, previous = latest[0], latest[1]
        entry = compute_loss_entry(table, current, previous)
        if entry is None:
            return None

        if self._loss.exists(entry.machine, entry.end_time):
            return None
        if not self._loss.insert(entry):
            logger.debug("Loss entry for %s at %s inserted concurrently", table, entry.end_time)
            return None

        logger.info(
            "Loss time %s: %ds idle before %s",
            table,
            entry.loss_seconds,
            entry.end_time.isoformat(sep=" "),
        )
        return entry

    async def derive(self, table: str) -> Optional[LossTimeEntry]:
        """Async wrapper. Store faults are logged, never raised."""
        try:
            return await asyncio.to_thread(self.derive_sync, table)
        except Exception as e:
            logger.error("Loss time derivation failed for %s: %s", table, e)
            return None
