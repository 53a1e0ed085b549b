"""Data access objects for production records and loss-time entries.

Every method opens its own cursor so that repositories can be called from
worker threads (``asyncio.to_thread``) without sharing a DuckDB connection.
"""

from __future__ import annotations

from datetime import datetime

import duckdb
import polars as pl

from prodline_collector.ingestion.models import LossTimeEntry, ProductionRecord, StoredRecord
from prodline_collector.storage.database import Database
from prodline_collector.storage.schema import (
    LOSS_TIME_TABLE,
    PRODUCTION_COLUMNS,
    is_valid_table_name,
)

_PRODUCTION_SCHEMA = {
    "date_time": pl.Datetime("us"),
    "model": pl.Utf8,
    "daily_plan": pl.Int32,
    "target": pl.Int32,
    "actual": pl.Int32,
    "weight": pl.Float64,
    "efficiency": pl.Float64,
    "serial_number": pl.Utf8,
    "sut": pl.Int32,
    "file_date": pl.Date,
}


def _checked(table: str) -> str:
    if not is_valid_table_name(table):
        raise ValueError(f"Invalid table name: {table!r}")
    return table


def _optional_float(value: object) -> float | None:
    return None if value is None else float(value)


class ProductionRepo:
    """Operations on the per-line production tables."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def exists(self, table: str, record: ProductionRecord) -> bool:
        """Whether a row with the same dedup identity is already stored."""
        table = _checked(table)
        if record.serial_number:
            query = f"SELECT 1 FROM {table} WHERE serial_number = ? LIMIT 1"
            params: list = [record.serial_number]
        else:
            query = (
                f"SELECT 1 FROM {table} WHERE file_date = ? AND model = ? "
                "AND target = ? AND actual = ? AND sut = ? LIMIT 1"
            )
            params = [record.file_date, record.model, record.target, record.actual, record.sut]
        with self._db.cursor() as cur:
            return cur.execute(query, params).fetchone() is not None

    def insert_batch(self, table: str, records: list[ProductionRecord]) -> int:
        """Insert records in one statement using Polars for the bulk load."""
        table = _checked(table)
        if not records:
            return 0

        df = pl.DataFrame(
            {
                "date_time": [r.timestamp for r in records],
                "model": [r.model for r in records],
                "daily_plan": [r.daily_plan for r in records],
                "target": [r.target for r in records],
                "actual": [r.actual for r in records],
                "weight": [_optional_float(r.weight) for r in records],
                "efficiency": [_optional_float(r.efficiency) for r in records],
                "serial_number": [r.serial_number for r in records],
                "sut": [r.sut for r in records],
                "file_date": [r.file_date for r in records],
            },
            schema=_PRODUCTION_SCHEMA,
        )
        cols = ", ".join(PRODUCTION_COLUMNS)
        with self._db.cursor() as cur:
            cur.execute(f"INSERT INTO {table} ({cols}) SELECT {cols} FROM df")
        return len(records)

    def latest_two(self, table: str) -> list[StoredRecord]:
        """The two most recently inserted rows, newest first."""
        table = _checked(table)
        with self._db.cursor() as cur:
            rows = cur.execute(
                f"SELECT date_time, sut FROM {table} ORDER BY id DESC LIMIT 2"
            ).fetchall()
        return [StoredRecord(timestamp=r[0], sut=r[1] or 0) for r in rows]

    def count(self, table: str) -> int:
        table = _checked(table)
        with self._db.cursor() as cur:
            return cur.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


class LossTimeRepo:
    """Operations on the shared loss_time table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def exists(self, machine: str, end_time: datetime) -> bool:
        with self._db.cursor() as cur:
            row = cur.execute(
                f"SELECT 1 FROM {LOSS_TIME_TABLE} WHERE machine = ? AND end_time = ?",
                [machine, end_time],
            ).fetchone()
        return row is not None

    def insert(self, entry: LossTimeEntry) -> bool:
        """Insert one entry. Returns False if the key was taken meanwhile."""
        try:
            with self._db.cursor() as cur:
                cur.execute(
                    f"""INSERT INTO {LOSS_TIME_TABLE}
                       (loss_date, machine, start_time, loss_seconds, end_time)
                       VALUES (?, ?, ?, ?, ?)""",
                    [
                        entry.loss_date,
                        entry.machine,
                        entry.start_time,
                        entry.loss_seconds,
                        entry.end_time,
                    ],
                )
        except duckdb.ConstraintException:
            return False
        return True

    def count_for(self, machine: str) -> int:
        with self._db.cursor() as cur:
            return cur.execute(
                f"SELECT COUNT(*) FROM {LOSS_TIME_TABLE} WHERE machine = ?", [machine]
            ).fetchone()[0]

    def totals_by_machine(self) -> dict[str, tuple[int, int]]:
        """machine -> (entry count, total loss seconds)."""
        with self._db.cursor() as cur:
            rows = cur.execute(
                f"""SELECT machine, COUNT(*), COALESCE(SUM(loss_seconds), 0)
                    FROM {LOSS_TIME_TABLE} GROUP BY machine ORDER BY machine"""
            ).fetchall()
        return {r[0]: (r[1], r[2]) for r in rows}
