"""Per-line polling: discover, decide, parse, dedup, insert, archive."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable

from prodline_collector.agent.config import CollectorConfig, LineConfig
from prodline_collector.agent.share import LineShare
from prodline_collector.agent.tracker import FileTracker
from prodline_collector.ingestion.file_reader import FileReader, decode_lines
from prodline_collector.ingestion.models import FileResult, ProductionRecord, SourceFile
from prodline_collector.processing.dedup import DuplicateChecker
from prodline_collector.processing.writer import StoreWriter

logger = logging.getLogger(__name__)

SKIPPED = "skipped"
PROCESSED = "processed"
ERRORED = "errored"


class LinePoller:
    """Runs one line's files through the pipeline, one file at a time.

    Files of a line are handled sequentially inside a single task, so the
    loss-time derivation after each batch sees that line's own latest insert.
    """

    def __init__(
        self,
        line: LineConfig,
        share: LineShare,
        tracker: FileTracker,
        dedup: DuplicateChecker,
        writer: StoreWriter,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.line = line
        self._share = share
        self._tracker = tracker
        self._dedup = dedup
        self._writer = writer
        self._clock = clock

    @classmethod
    def for_line(
        cls,
        line: LineConfig,
        config: CollectorConfig,
        dedup: DuplicateChecker,
        writer: StoreWriter,
        clock: Callable[[], datetime] = datetime.now,
    ) -> LinePoller:
        share = LineShare(config.source_root(line), config.archive_folder)
        return cls(line, share, FileTracker(), dedup, writer, clock)

    async def poll(self, stop_event: asyncio.Event) -> list[FileResult]:
        """Process every candidate file on the share once."""
        if not self.line.ip:
            return []

        results: list[FileResult] = []
        try:
            if not await asyncio.to_thread(self._share.is_reachable):
                logger.debug("Line %s: %s not reachable", self.line.name, self._share.source_root)
                return results

            await asyncio.to_thread(self._share.ensure_archive)
            sources = await asyncio.to_thread(self._share.list_sources)

            for source in sources:
                if stop_event.is_set():
                    break
                results.append(await self.process_file(source))
        except Exception as e:
            logger.error("Error line %s: %s", self.line.name, e)
        return results

    async def process_file(self, source: SourceFile) -> FileResult:
        """Run one file through the pipeline. Faults leave it unarchived."""
        archive_path = self._share.archive_path_for(source)
        try:
            if not await asyncio.to_thread(self._tracker.should_process, source, archive_path):
                return FileResult(self.line.name, source.file_name, SKIPPED)

            content = await asyncio.to_thread(self._share.read_content, source)
            accepted = await self._accept_new(source, decode_lines(content))

            inserted = await self._writer.write(self.line.table_name, accepted)
            if inserted:
                logger.info(
                    "Inserted %d records from %s into %s",
                    inserted,
                    source.file_name,
                    self.line.table_name,
                )

            await asyncio.to_thread(self._tracker.archive, source, archive_path, content)
            return FileResult(self.line.name, source.file_name, PROCESSED, inserted=inserted)
        except Exception as e:
            logger.error("Failed to process %s (line %s): %s", source.file_name, self.line.name, e)
            return FileResult(self.line.name, source.file_name, ERRORED, error=str(e))

    async def _accept_new(self, source: SourceFile, lines: list[str]) -> list[ProductionRecord]:
        """Parsed records that are neither stored already nor repeated in this file."""
        reader = FileReader(source, clock=self._clock)
        accepted: list[ProductionRecord] = []
        seen: set = set()

        for record in reader.parse_records(lines):
            key = record.identity()
            if key in seen:
                continue
            if await self._dedup.is_duplicate(record, self.line.table_name):
                continue
            seen.add(key)
            accepted.append(record)
        return accepted
