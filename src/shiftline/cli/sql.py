"""
CLI: ``shiftline sql`` -- raw SQL helpers.
"""

from __future__ import annotations

import typer

from shiftline.cli.utils import console, err_console, load_settings
from shiftline.core.errors import UnsafeQueryError
from shiftline.db.sqlfilter import UnsafeSQLFilter

app = typer.Typer(no_args_is_help=True)


@app.command("check")
def check(
    sql: str = typer.Argument(..., help="SQL text to run through the raw-path filter"),
) -> None:
    """Check raw SELECT text against the configured denylist."""
    sql_filter = UnsafeSQLFilter.from_settings(load_settings())
    try:
        sql_filter.check(sql)
    except UnsafeQueryError as e:
        err_console.print(f"[bold red]Rejected[/bold red] (pattern: {e.pattern})")
        raise typer.Exit(code=1) from e
    console.print("[green]OK[/green]")


@app.command("denylist")
def denylist() -> None:
    """Show the configured denylist."""
    sql_filter = UnsafeSQLFilter.from_settings(load_settings())
    for entry in sql_filter.denylist:
        console.print(entry, markup=False, highlight=False)
