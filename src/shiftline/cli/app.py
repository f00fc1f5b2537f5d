"""
Root Typer application for the shiftline CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from shiftline.core.logging import configure_logging

app = Typer(
    name="shiftline",
    help="shiftline -- driver shift backend and role-scoped SQL access.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from shiftline import __version__

        typer.echo(f"shiftline {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level for CLI commands."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON log lines."),
) -> None:
    """shiftline CLI -- check raw SQL, inspect roles, serve the API."""
    configure_logging(level=log_level, json_format=json_logs)


# ── Sub-command registration ─────────────────────────────────────────────

from shiftline.cli.roles import app as roles_app  # noqa: E402
from shiftline.cli.serve import app as serve_app  # noqa: E402
from shiftline.cli.sql import app as sql_app  # noqa: E402

app.add_typer(sql_app, name="sql", help="Raw SQL filter checks.")
app.add_typer(roles_app, name="roles", help="Database role inspection.")
app.add_typer(serve_app, name="serve", help="Start the API server.")


if __name__ == "__main__":
    app()
