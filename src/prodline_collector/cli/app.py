"""Typer CLI application."""

import typer

from prodline_collector.cli.commands.init_db import init_db
from prodline_collector.cli.commands.poll import poll, run
from prodline_collector.cli.commands.status import status

app = typer.Typer(
    name="prodline-collector",
    help="Production line data collector",
    no_args_is_help=True,
)

app.command("init-db")(init_db)
app.command()(poll)
app.command()(run)
app.command()(status)
