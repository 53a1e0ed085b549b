"""Shared test fixtures and sample production data."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

import pytest

from prodline_collector.agent.config import CollectorConfig, LineConfig
from prodline_collector.storage.database import Database

LINE_IP = "10.20.1.15"
LINE_TABLES = ["line_a", "line_b"]

HEADER = "Model,Target,Actual,NG,DailyPlan,SerialNumber,Sut"

# Real-looking rows as written by the line PCs
SAMPLE_ROWS = {
    "full": "AX-200, 120 ,57,1,480,SN0001,42",
    "full_next": "AX-200,120,58,0,480,SN0002,42",
    "no_serial": "BX-10,60,12,0,300,,35",
    "six_fields": "CX-7,10,3,0,50,SN0777",
    "short": "AX-200,120,57,1,480",
    "bad_numbers": "AX-200,abc,,x,4.5,SN0100,n/a",
    "blank": "",
    "whitespace": "   ",
}


class FakeClock:
    """Returns the given timestamps in order, then keeps repeating the last one."""

    def __init__(self, *times: datetime) -> None:
        self._times = list(times)
        self._last = times[0] if times else datetime(2025, 1, 1)

    def __call__(self) -> datetime:
        if self._times:
            self._last = self._times.pop(0)
        return self._last


def write_source(
    root: Path,
    name: str,
    rows: list[str],
    mtime: float | None = None,
) -> Path:
    """Write a production file with header and optionally pin its mtime."""
    p = root / name
    p.write_text("\n".join([HEADER] + rows) + "\n", encoding="utf-8")
    if mtime is not None:
        os.utime(p, (mtime, mtime))
    return p


@pytest.fixture
def tmp_db(tmp_path):
    """A temporary DuckDB database with the loss-time table and two line tables."""
    db = Database(str(tmp_path / "test.duckdb"))
    db.initialize(LINE_TABLES)
    yield db
    db.close()


@pytest.fixture
def share_root(tmp_path):
    """Source root of a line, laid out as <share>/<ip>/<base folder>."""
    root = tmp_path / "share" / LINE_IP / "Data Server"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def line():
    return LineConfig(name="Line A", ip=LINE_IP, table_name="line_a")


@pytest.fixture
def collector_config(tmp_path, line):
    return CollectorConfig(
        database=str(tmp_path / "test.duckdb"),
        source_template=str(tmp_path / "share" / "{ip}" / "{base_folder}"),
        poll_interval=0.01,
        lines=(line,),
    )
