"""Tests for the shiftline Typer CLI."""

from __future__ import annotations

import json
from unittest.mock import patch

from typer.testing import CliRunner

from shiftline import __version__
from shiftline.cli import app
from shiftline.settings import RoleSettings, ShiftlineSettings

runner = CliRunner()


def _memory_settings() -> ShiftlineSettings:
    return ShiftlineSettings(
        roles={
            "admin": RoleSettings(backend="sqlite", path=":memory:"),
            "driver": RoleSettings(backend="sqlite", path=":memory:"),
        }
    )


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"shiftline {__version__}" in result.output

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "sql" in result.output
        assert "roles" in result.output


class TestSqlCommands:
    def test_check_safe_select(self):
        result = runner.invoke(app, ["sql", "check", "SELECT * FROM tokens WHERE token_id = ?"])
        assert result.exit_code == 0
        assert "OK" in result.output

    def test_check_rejects_drop(self):
        result = runner.invoke(app, ["sql", "check", "SELECT 1; DROP TABLE tokens"])
        assert result.exit_code == 1
        assert "Rejected" in result.output

    def test_check_rejects_non_select(self):
        result = runner.invoke(app, ["sql", "check", "PRAGMA table_info(tokens)"])
        assert result.exit_code == 1

    def test_denylist_lists_entries(self):
        result = runner.invoke(app, ["sql", "denylist"])
        assert result.exit_code == 0
        assert "DROP" in result.output
        assert "--" in result.output


class TestRoleCommands:
    def test_list_json(self):
        with patch("shiftline.cli.roles.load_settings", return_value=_memory_settings()):
            result = runner.invoke(app, ["roles", "list", "--json"])
        assert result.exit_code == 0
        rows = json.loads(result.output)
        assert [row["role"] for row in rows] == ["admin", "driver"]
        assert all(row["backend"] == "sqlite" for row in rows)
        assert "password" not in result.output

    def test_list_table(self):
        with patch("shiftline.cli.roles.load_settings", return_value=_memory_settings()):
            result = runner.invoke(app, ["roles", "list"])
        assert result.exit_code == 0
        assert "admin" in result.output
        assert "driver" in result.output

    def test_ping_ok(self):
        with patch("shiftline.cli.roles.load_settings", return_value=_memory_settings()):
            result = runner.invoke(app, ["roles", "ping", "driver"])
        assert result.exit_code == 0
        assert "driver: ok" in result.output

    def test_ping_unknown_role(self):
        with patch("shiftline.cli.roles.load_settings", return_value=_memory_settings()):
            result = runner.invoke(app, ["roles", "ping", "auditor"])
        assert result.exit_code == 1
        assert "ConfigurationError" in result.output


class TestServeCommand:
    def test_start_uses_settings_defaults(self):
        with (
            patch("shiftline.cli.serve.load_settings", return_value=ShiftlineSettings(port=9090)),
            patch("uvicorn.run") as run,
        ):
            result = runner.invoke(app, ["serve", "start"])
        assert result.exit_code == 0
        args, kwargs = run.call_args
        assert args == ("shiftline.api:create_app",)
        assert kwargs["factory"] is True
        assert kwargs["port"] == 9090
        assert kwargs["host"] == "0.0.0.0"

    def test_start_overrides(self):
        with patch("uvicorn.run") as run:
            result = runner.invoke(app, ["serve", "start", "--host", "127.0.0.1", "--port", "8000"])
        assert result.exit_code == 0
        assert run.call_args.kwargs["host"] == "127.0.0.1"
        assert run.call_args.kwargs["port"] == 8000
