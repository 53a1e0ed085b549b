"""Decides whether a source file is new or updated relative to its archive copy."""

from __future__ import annotations

import logging
from pathlib import Path

from prodline_collector.agent.share import LineShare
from prodline_collector.ingestion.models import SourceFile

logger = logging.getLogger(__name__)

# Archive copies carry the source mtime; allow for filesystems with coarse
# timestamp resolution.
MTIME_TOLERANCE_SECONDS = 1.0


class FileTracker:
    """The archive copy is the only "already processed" marker."""

    def __init__(self, tolerance: float = MTIME_TOLERANCE_SECONDS) -> None:
        self._tolerance = tolerance

    def should_process(self, source: SourceFile, archive_path: Path) -> bool:
        archived_mtime = LineShare.modified_time(archive_path)
        if archived_mtime is None:
            return True
        if source.modified <= archived_mtime + self._tolerance:
            return False
        logger.info("File %s updated, reprocessing", source.file_name)
        return True

    def archive(self, source: SourceFile, archive_path: Path, content: bytes) -> None:
        """Record a completed processing attempt. The source stays in place.

        ``content`` is what was parsed, stamped with the mtime seen at listing
        time. Rows appended since then leave the source newer than its archive,
        so the file is picked up again next cycle.
        """
        LineShare.write_archive(content, source.modified, archive_path)
