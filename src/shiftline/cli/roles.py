"""
CLI: ``shiftline roles`` -- configured database roles.
"""

from __future__ import annotations

import typer

from shiftline.cli.utils import build_registry, console, err_console, load_settings, print_rows
from shiftline.core.errors import ShiftlineError

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_roles(
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """List configured roles and their backends (no secrets)."""
    settings = load_settings()
    rows = [
        {
            "role": name,
            "backend": role.backend.value,
            "target": role.to_database_config().to_display_string(),
            "pool_size": role.pool_size,
        }
        for name, role in sorted(settings.roles.items())
    ]
    print_rows(rows, title="Database Roles", as_json=json_out)


@app.command("ping")
def ping(
    role: str = typer.Argument(..., help="Role name, e.g. admin or driver"),
) -> None:
    """Run ``SELECT 1`` on a role's connection pool."""
    registry = build_registry(load_settings())
    try:
        adapter = registry.resolve(role)
        adapter.ping()
    except ShiftlineError as e:
        err_console.print(f"[bold red]Error[/bold red] ({type(e).__name__}): {e.message}")
        raise typer.Exit(code=1) from e
    finally:
        registry.close()
    console.print(f"[green]{role}: ok[/green]")
