"""Status command: show per-line record counts and loss time."""

from __future__ import annotations

import duckdb
import typer
from rich.console import Console
from rich.table import Table

from prodline_collector.agent.config import CollectorConfig
from prodline_collector.cli.options import CONFIG_HELP, DB_HELP, load_cli_config
from prodline_collector.storage.database import Database
from prodline_collector.storage.repositories import LossTimeRepo, ProductionRepo

console = Console()


def status(
    config: str = typer.Option("", help=CONFIG_HELP),
    db_path: str = typer.Option("", help=DB_HELP),
) -> None:
    """Show database statistics."""
    settings = load_cli_config(config, db_path)
    try:
        with Database(settings.database) as db:
            _show_status(db, settings)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("[dim]Run 'init-db' first to create the tables.[/dim]")
        raise typer.Exit(1)


def _show_status(db: Database, settings: CollectorConfig) -> None:
    production = ProductionRepo(db)
    loss_totals = LossTimeRepo(db).totals_by_machine()

    table = Table(title="Production Collector Status")
    table.add_column("Line", style="cyan")
    table.add_column("Table")
    table.add_column("Records", justify="right", style="green")
    table.add_column("Loss entries", justify="right")
    table.add_column("Loss time", justify="right")

    for line in settings.lines:
        try:
            records = f"{production.count(line.table_name):,}"
        except duckdb.CatalogException:
            records = "[red]missing[/red]"
        entries, seconds = loss_totals.get(line.table_name, (0, 0))
        table.add_row(
            line.name,
            line.table_name,
            records,
            str(entries),
            _format_duration(seconds),
        )

    console.print(table)


def _format_duration(seconds: int) -> str:
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}h {minutes:02d}m {secs:02d}s"
