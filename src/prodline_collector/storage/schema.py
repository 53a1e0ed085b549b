"""DuckDB table definitions."""

from __future__ import annotations

import re

LOSS_TIME_TABLE = "loss_time"

# Shared derived idle-time entries, one per (machine, end_time)
LOSS_TIME_DDL = f"""
CREATE TABLE IF NOT EXISTS {LOSS_TIME_TABLE} (
    loss_date     DATE NOT NULL,
    machine       TEXT NOT NULL,
    start_time    TIME NOT NULL,
    loss_seconds  INTEGER NOT NULL,
    end_time      TIMESTAMP NOT NULL,
    PRIMARY KEY (machine, end_time)
);
"""

# One table per production line. The sequence gives the insertion order
# used to pick the two latest records.
LINE_TABLE_DDL = """
CREATE SEQUENCE IF NOT EXISTS {table}_id_seq START 1;

CREATE TABLE IF NOT EXISTS {table} (
    id            BIGINT PRIMARY KEY DEFAULT nextval('{table}_id_seq'),
    date_time     TIMESTAMP NOT NULL,
    model         TEXT NOT NULL,
    daily_plan    INTEGER,
    target        INTEGER,
    actual        INTEGER,
    weight        DECIMAL(18, 2),
    efficiency    DECIMAL(18, 2),
    serial_number TEXT,
    sut           INTEGER,
    file_date     DATE
);
"""

PRODUCTION_COLUMNS = [
    "date_time",
    "model",
    "daily_plan",
    "target",
    "actual",
    "weight",
    "efficiency",
    "serial_number",
    "sut",
    "file_date",
]

TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_valid_table_name(name: str) -> bool:
    """Table names are interpolated into SQL, so only plain identifiers pass."""
    return bool(name) and TABLE_NAME_PATTERN.match(name) is not None


def line_table_ddl(table: str) -> str:
    if not is_valid_table_name(table):
        raise ValueError(f"Invalid table name: {table!r}")
    return LINE_TABLE_DDL.format(table=table)
