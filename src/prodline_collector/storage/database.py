"""DuckDB connection manager and table setup."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import duckdb

from prodline_collector.storage.schema import LOSS_TIME_DDL, line_table_ddl

DEFAULT_DB_PATH = "./data/production.duckdb"


class Database:
    """One DuckDB connection shared by every line.

    Worker threads never use ``conn`` directly; each repository call takes
    its own ``cursor()``.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH) -> None:
        self.db_path = db_path
        self._conn: duckdb.DuckDBPyConnection | None = None

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = duckdb.connect(self.db_path)
        return self._conn

    def cursor(self) -> duckdb.DuckDBPyConnection:
        """A separate connection onto the same database, for use from one thread."""
        return self.conn.cursor()

    def initialize(self, line_tables: Iterable[str] = ()) -> None:
        """Create the shared loss-time table and any missing line tables.

        Existing tables are left exactly as they are.
        """
        self.conn.execute(LOSS_TIME_DDL)
        for table in line_tables:
            self.conn.execute(line_table_ddl(table))

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> Database:
        self.initialize()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
