"""
CLI utility helpers -- consoles, settings and registry construction.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from shiftline.db.roles import RoleRegistry
from shiftline.settings import ShiftlineSettings

console = Console()
err_console = Console(stderr=True)


def load_settings() -> ShiftlineSettings:
    """Settings from the environment and ``.env``."""
    return ShiftlineSettings()


def build_registry(settings: ShiftlineSettings | None = None) -> RoleRegistry:
    return RoleRegistry.from_settings(settings or load_settings())


def print_rows(rows: list[dict[str, Any]], *, title: str = "", as_json: bool = False) -> None:
    """Render a list of flat dicts as a Rich table (or JSON)."""
    if as_json:
        console.print_json(json.dumps(rows, default=str))
        return
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*(str(v) if v is not None else "" for v in row.values()))
    console.print(table)
