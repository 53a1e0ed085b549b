"""Batch writer for accepted production records."""

from __future__ import annotations

import asyncio
import logging

from prodline_collector.ingestion.models import ProductionRecord
from prodline_collector.processing.loss_time import LossTimeDeriver
from prodline_collector.storage.repositories import ProductionRepo

logger = logging.getLogger(__name__)


class StoreWriter:
    """Inserts one batch per file, then refreshes the line's loss time."""

    def __init__(self, repo: ProductionRepo, deriver: LossTimeDeriver) -> None:
        self._repo = repo
        self._deriver = deriver

    async def write(self, table: str, records: list[ProductionRecord]) -> int:
        """Insert ``records`` into ``table`` as a single statement.

        Insert failures propagate to the caller. Derivation runs only after
        a non-empty batch succeeded and cannot undo it.
        """
        if not records:
            return 0

        inserted = await asyncio.to_thread(self._repo.insert_batch, table, records)
        await self._deriver.derive(table)
        return inserted
