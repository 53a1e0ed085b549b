"""Line-level parser for comma-delimited production files."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Callable, Optional

from prodline_collector.ingestion.models import ProductionRecord

DELIMITER = ","
MIN_FIELDS = 6

# Field positions: model, target, actual, reject count, daily plan, serial, unit time
F_MODEL = 0
F_TARGET = 1
F_ACTUAL = 2
F_DAILY_PLAN = 4
F_SERIAL = 5
F_SUT = 6

INT_PATTERN = re.compile(r"^[+-]?\d+$")
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


def parse_int(raw: Optional[str]) -> int:
    """Permissive integer parse: anything that is not a 32-bit integer is 0."""
    if raw is None:
        return 0
    text = raw.strip()
    if not INT_PATTERN.match(text):
        return 0
    value = int(text)
    if value < INT32_MIN or value > INT32_MAX:
        return 0
    return value


class RecordParser:
    """Turns raw data lines into ProductionRecord objects."""

    def __init__(
        self,
        file_date: date,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._file_date = file_date
        self._clock = clock

    def parse_line(self, raw: str) -> Optional[ProductionRecord]:
        """Parse a single data line (never the header).

        Returns None for blank lines and rows with fewer than six fields.
        Malformed numbers become 0 rather than rejecting the row.
        """
        if not raw or not raw.strip():
            return None

        parts = raw.split(DELIMITER)
        if len(parts) < MIN_FIELDS:
            return None

        # Six-field rows carry no unit time
        sut_raw = parts[F_SUT] if len(parts) > F_SUT else None

        return ProductionRecord(
            timestamp=self._clock(),
            model=parts[F_MODEL].strip(),
            daily_plan=parse_int(parts[F_DAILY_PLAN]),
            target=parse_int(parts[F_TARGET]),
            actual=parse_int(parts[F_ACTUAL]),
            serial_number=parts[F_SERIAL].strip(),
            sut=parse_int(sut_raw),
            file_date=self._file_date,
        )
