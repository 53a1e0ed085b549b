"""Duplicate suppression against the destination table."""

from __future__ import annotations

import asyncio

from prodline_collector.ingestion.models import ProductionRecord
from prodline_collector.storage.repositories import ProductionRepo


class DuplicateChecker:
    """Decides whether a candidate record is already stored.

    Serial numbers are globally unique once assigned, so a matching serial
    is a duplicate regardless of the other fields. Records without a serial
    match on (file date, model, target, actual, unit time). The check is
    not atomic with the later insert.
    """

    def __init__(self, repo: ProductionRepo) -> None:
        self._repo = repo

    async def is_duplicate(self, record: ProductionRecord, table: str) -> bool:
        return await asyncio.to_thread(self._repo.exists, table, record)
