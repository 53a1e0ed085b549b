"""Filesystem access to a line's shared folder and its archive subfolder."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from prodline_collector.ingestion.file_reader import describe_source
from prodline_collector.ingestion.models import SourceFile

logger = logging.getLogger(__name__)

SOURCE_GLOB = "*.txt"


class LineShare:
    """The source root of one line (usually a UNC path) and its archive."""

    def __init__(self, source_root: str, archive_folder: str = "Processed") -> None:
        self.source_root = Path(source_root)
        self.archive_root = self.source_root / archive_folder

    def is_reachable(self) -> bool:
        return self.source_root.is_dir()

    def ensure_archive(self) -> None:
        self.archive_root.mkdir(parents=True, exist_ok=True)

    def list_sources(self) -> list[SourceFile]:
        """Top-level *.txt files, sorted by name. The archive is not descended.

        Files removed between the directory scan and their stat are left out.
        """
        sources = []
        for p in sorted(self.source_root.glob(SOURCE_GLOB)):
            if not p.is_file():
                continue
            try:
                sources.append(describe_source(str(p)))
            except FileNotFoundError:
                logger.debug("File %s vanished while listing", p.name)
        return sources

    def archive_path_for(self, source: SourceFile) -> Path:
        return self.archive_root / source.file_name

    def read_content(self, source: SourceFile) -> bytes:
        with open(source.path, "rb") as f:
            return f.read()

    @staticmethod
    def modified_time(path: Path) -> float | None:
        """mtime of ``path``, or None when it does not exist."""
        try:
            return os.stat(path).st_mtime
        except FileNotFoundError:
            return None

    @staticmethod
    def write_archive(content: bytes, modified: float, dest: Path) -> None:
        """Write ``content`` over ``dest`` and stamp it with ``modified``.

        The bytes land in a temporary file next to ``dest`` first and are
        moved into place with os.replace, so an interrupted write leaves the
        old archive untouched.
        """
        dest.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".tmp", dir=dest.parent)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            os.utime(tmp_name, (modified, modified))
            os.replace(tmp_name, dest)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise
