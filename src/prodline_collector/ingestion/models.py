"""Data models for the ingestion layer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional, Union

RecordIdentity = Union[tuple[str, str], tuple[str, date, str, int, int, int]]


@dataclass
class SourceFile:
    """A raw file discovered on a line's share during one poll cycle."""

    path: str
    file_name: str
    modified: float  # POSIX mtime of the source
    file_date: date  # from yyyy-MM-dd filename, else the day it was seen


@dataclass
class ProductionRecord:
    """One accepted production row."""

    timestamp: datetime  # wall-clock insertion time
    model: str
    daily_plan: int
    target: int
    actual: int
    serial_number: str = ""
    sut: int = 0  # standard unit time, seconds
    file_date: Optional[date] = None
    weight: Optional[Decimal] = None
    efficiency: Optional[Decimal] = None

    def identity(self) -> RecordIdentity:
        """Key used for duplicate suppression.

        The serial number alone when present, otherwise the
        (file date, model, target, actual, unit time) tuple.
        """
        if self.serial_number:
            return ("sn", self.serial_number)
        return ("tuple", self.file_date, self.model, self.target, self.actual, self.sut)


@dataclass
class StoredRecord:
    """The slice of a stored row needed for loss-time derivation."""

    timestamp: datetime
    sut: int


@dataclass
class LossTimeEntry:
    """Idle time inferred between two consecutive records of a line."""

    loss_date: date
    machine: str
    start_time: time  # time-of-day of the previous record
    loss_seconds: int
    end_time: datetime  # timestamp of the current record


@dataclass
class FileResult:
    """Outcome of one file within a poll cycle."""

    line_name: str
    file_name: str
    status: str  # skipped, processed, errored
    inserted: int = 0
    error: str = ""
