"""Init-db command: create the loss-time table and the line tables."""

from __future__ import annotations

import typer
from rich.console import Console

from prodline_collector.cli.options import CONFIG_HELP, DB_HELP, load_cli_config
from prodline_collector.storage.database import Database

console = Console()


def init_db(
    config: str = typer.Option("", help=CONFIG_HELP),
    db_path: str = typer.Option("", help=DB_HELP),
) -> None:
    """Create missing tables. Existing tables are not altered."""
    settings = load_cli_config(config, db_path)
    tables = [line.table_name for line in settings.lines]

    db = Database(settings.database)
    try:
        db.initialize(tables)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    finally:
        db.close()

    console.print(f"[green]Initialized {settings.database}[/green]")
    for table in tables:
        console.print(f"  {table}")
