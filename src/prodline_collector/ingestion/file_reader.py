"""Streaming file reader with filename date extraction."""

from __future__ import annotations

import io
import os
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Iterator, Optional

from prodline_collector.ingestion.models import ProductionRecord, SourceFile
from prodline_collector.ingestion.parser import RecordParser

# Filenames: 2025-11-30.txt -> 2025-11-30, anything else -> today
FILENAME_DATE_FORMAT = "%Y-%m-%d"


def extract_file_date(file_name: str, today: Optional[date] = None) -> date:
    """Derive the production date from a file name, falling back to today."""
    stem = Path(file_name).stem
    try:
        return datetime.strptime(stem, FILENAME_DATE_FORMAT).date()
    except ValueError:
        return today or date.today()


def describe_source(file_path: str) -> SourceFile:
    """Stat a discovered file and build its SourceFile."""
    p = Path(file_path)
    return SourceFile(
        path=str(p),
        file_name=p.name,
        modified=os.stat(p).st_mtime,
        file_date=extract_file_date(p.name),
    )


def decode_lines(content: bytes) -> list[str]:
    """Split raw file bytes into lines, tolerating a BOM and undecodable bytes."""
    with io.TextIOWrapper(io.BytesIO(content), encoding="utf-8-sig", errors="replace") as f:
        return [line.rstrip("\n\r") for line in f]


def read_raw_lines(file_path: str) -> list[str]:
    with open(file_path, "rb") as f:
        return decode_lines(f.read())


class FileReader:
    """Parses production records out of one source file."""

    def __init__(
        self,
        source: SourceFile,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.source = source
        self._parser = RecordParser(source.file_date, clock=clock)

    def parse_records(self, lines: list[str]) -> Iterator[ProductionRecord]:
        """Yield records in file order. The first line is always the header."""
        for raw in lines[1:]:
            record = self._parser.parse_line(raw)
            if record is not None:
                yield record

    def read_records(self) -> Iterator[ProductionRecord]:
        yield from self.parse_records(read_raw_lines(self.source.path))
