"""shiftline command line interface (typer)."""

from shiftline.cli.app import app

__all__ = ["app"]
