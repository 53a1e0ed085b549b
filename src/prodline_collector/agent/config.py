"""Collector configuration from a JSON settings file and environment variables."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from prodline_collector.storage.database import DEFAULT_DB_PATH
from prodline_collector.storage.schema import LOSS_TIME_TABLE, is_valid_table_name


class ConfigError(Exception):
    """The settings file is missing or malformed."""


@dataclass(frozen=True)
class LineConfig:
    """One monitored production line."""

    name: str
    ip: str
    table_name: str


@dataclass(frozen=True)
class CollectorConfig:
    """Configuration for the collector. Loaded once, never reloaded."""

    # DuckDB database file
    database: str = DEFAULT_DB_PATH
    # Shared folder name on each line PC
    base_folder: str = "Data Server"
    # Source root per line, formatted with ip and base_folder
    source_template: str = r"\\{ip}\{base_folder}"
    # Subfolder of the source root holding processed copies
    archive_folder: str = "Processed"
    # Seconds between poll cycles
    poll_interval: float = 5.0
    lines: tuple[LineConfig, ...] = field(default_factory=tuple)

    def source_root(self, line: LineConfig) -> str:
        return self.source_template.format(ip=line.ip, base_folder=self.base_folder)

    @classmethod
    def from_dict(cls, data: dict) -> CollectorConfig:
        try:
            lines = tuple(
                LineConfig(
                    name=str(item.get("name", "")),
                    ip=str(item.get("ip", "") or ""),
                    table_name=str(item.get("table_name", "")),
                )
                for item in data.get("lines", [])
            )
            defaults = cls()
            return cls(
                database=data.get("database", defaults.database),
                base_folder=data.get("base_folder", defaults.base_folder),
                source_template=data.get("source_template", defaults.source_template),
                archive_folder=data.get("archive_folder", defaults.archive_folder),
                poll_interval=float(data.get("poll_interval", defaults.poll_interval)),
                lines=lines,
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise ConfigError(f"Malformed configuration: {e}") from e

    @classmethod
    def from_file(cls, path: str) -> CollectorConfig:
        """Load a JSON settings file."""
        p = Path(path)
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: str = "") -> CollectorConfig:
        """Load from file, then apply environment overrides.

        Env vars:
            PRODLINE_CONFIG         - Settings file (when no path is given)
            PRODLINE_DB             - Database path, overrides the file
            PRODLINE_POLL_INTERVAL  - Seconds between cycles, overrides the file
        """
        path = path or os.environ.get("PRODLINE_CONFIG", "")
        if not path:
            raise ConfigError("No config file given (use --config or PRODLINE_CONFIG)")
        config = cls.from_file(path)

        overrides: dict = {}
        if os.environ.get("PRODLINE_DB"):
            overrides["database"] = os.environ["PRODLINE_DB"]
        if os.environ.get("PRODLINE_POLL_INTERVAL"):
            try:
                overrides["poll_interval"] = float(os.environ["PRODLINE_POLL_INTERVAL"])
            except ValueError as e:
                raise ConfigError(f"PRODLINE_POLL_INTERVAL is not a number: {e}") from e
        if not overrides:
            return config
        return replace(config, **overrides)

    def validate(self) -> list[str]:
        """Return list of validation errors, empty if config is valid."""
        errors = []
        if not self.database:
            errors.append("database is required")
        if not self.base_folder:
            errors.append("base_folder is required")
        if self.poll_interval <= 0:
            errors.append(f"poll_interval must be positive, got {self.poll_interval}")
        if not self.lines:
            errors.append("at least one line is required")

        seen_tables: set[str] = set()
        for i, line in enumerate(self.lines):
            label = line.name or f"lines[{i}]"
            if not line.name:
                errors.append(f"lines[{i}]: name is required")
            if not is_valid_table_name(line.table_name):
                errors.append(f"{label}: invalid table_name {line.table_name!r}")
            elif line.table_name == LOSS_TIME_TABLE:
                errors.append(f"{label}: table_name {LOSS_TIME_TABLE!r} is reserved")
            elif line.table_name in seen_tables:
                errors.append(f"{label}: table_name {line.table_name!r} used by another line")
            seen_tables.add(line.table_name)
        return errors
