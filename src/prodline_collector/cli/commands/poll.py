"""Poll and run commands: one cycle, or the scheduler loop."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from prodline_collector.agent.config import CollectorConfig
from prodline_collector.agent.scheduler import Scheduler
from prodline_collector.agent.service import configure_logging, serve
from prodline_collector.cli.options import CONFIG_HELP, DB_HELP, load_cli_config
from prodline_collector.ingestion.models import FileResult
from prodline_collector.storage.database import Database

console = Console()

STATUS_STYLES = {"processed": "green", "skipped": "dim", "errored": "red"}


def poll(
    config: str = typer.Option("", help=CONFIG_HELP),
    db_path: str = typer.Option("", help=DB_HELP),
    show_skipped: bool = typer.Option(False, help="List files that were already archived"),
) -> None:
    """Run a single poll cycle over all lines and report per-file outcomes."""
    settings = load_cli_config(config, db_path)
    results = asyncio.run(_poll_once(settings))
    _print_results(results, show_skipped)
    if any(r.status == "errored" for r in results):
        raise typer.Exit(1)


def run(
    config: str = typer.Option("", help=CONFIG_HELP),
    db_path: str = typer.Option("", help=DB_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Poll all lines forever until Ctrl+C."""
    settings = load_cli_config(config, db_path)
    configure_logging("DEBUG" if verbose else "")
    console.print(
        f"[bold]Polling {len(settings.lines)} lines every {settings.poll_interval:g}s[/bold]"
    )
    asyncio.run(serve(settings))


async def _poll_once(settings: CollectorConfig) -> list[FileResult]:
    db = Database(settings.database)
    try:
        db.initialize(line.table_name for line in settings.lines)
        scheduler = Scheduler.from_config(settings, db)
        return await scheduler.run_cycle(asyncio.Event())
    finally:
        db.close()


def _print_results(results: list[FileResult], show_skipped: bool) -> None:
    shown = [r for r in results if show_skipped or r.status != "skipped"]
    if not shown:
        console.print("[dim]No new or updated files.[/dim]")
        return

    table = Table(title="Poll Results")
    table.add_column("Line", style="cyan")
    table.add_column("File")
    table.add_column("Status")
    table.add_column("Inserted", justify="right")
    table.add_column("Error")
    for r in shown:
        style = STATUS_STYLES.get(r.status, "white")
        table.add_row(
            r.line_name,
            r.file_name,
            f"[{style}]{r.status}[/{style}]",
            str(r.inserted),
            r.error[:60],
        )
    console.print(table)
