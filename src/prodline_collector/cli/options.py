"""Option handling shared by the CLI commands."""

from __future__ import annotations

from dataclasses import replace

import typer
from rich.console import Console

from prodline_collector.agent.config import CollectorConfig, ConfigError

console = Console()

CONFIG_HELP = "JSON settings file. Env: PRODLINE_CONFIG"
DB_HELP = "DuckDB database file. Env: PRODLINE_DB"


def load_cli_config(config_path: str, db_path: str = "") -> CollectorConfig:
    """Load and validate settings, exiting with status 1 on any problem."""
    try:
        config = CollectorConfig.load(config_path)
    except ConfigError as e:
        console.print(f"[red]Config error: {e}[/red]")
        raise typer.Exit(1)
    if db_path:
        config = replace(config, database=db_path)

    errors = config.validate()
    if errors:
        for err in errors:
            console.print(f"[red]Config error: {err}[/red]")
        raise typer.Exit(1)
    return config
