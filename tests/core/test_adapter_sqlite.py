"""Tests for ``shiftline.core.adapters.sqlite`` -- SQLite adapter."""

from __future__ import annotations

import sqlite3
import threading
from unittest.mock import MagicMock, patch

import pytest
from structlog.testing import capture_logs

from shiftline.core.adapters import DatabaseConfig, DatabaseType, QueryResult, SQLiteAdapter
from shiftline.core.errors import DatabaseConnectionError, ExecutionError


@pytest.fixture
def adapter():
    a = SQLiteAdapter(":memory:")
    a.run_statement("CREATE TABLE items (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL)")
    yield a
    a.disconnect()


class TestSQLiteAdapterInit:
    def test_default_memory(self):
        adapter = SQLiteAdapter()
        assert adapter.db_type == DatabaseType.SQLITE
        assert adapter.config.path == ":memory:"
        assert adapter.is_connected is False

    def test_from_config(self):
        config = DatabaseConfig(db_type=DatabaseType.SQLITE, path="/tmp/shiftline-test.db", connect_timeout=3)
        adapter = SQLiteAdapter.from_config(config)
        assert adapter.config.path == "/tmp/shiftline-test.db"


class TestSQLiteAdapterConnect:
    def test_connect_memory(self):
        adapter = SQLiteAdapter(":memory:")
        adapter.connect()
        assert adapter.is_connected is True
        adapter.disconnect()
        assert adapter.is_connected is False

    def test_connect_enables_foreign_keys(self):
        adapter = SQLiteAdapter(":memory:")
        result = adapter.run_query("PRAGMA foreign_keys")
        assert result.rows[0][0] == 1
        adapter.disconnect()

    def test_connects_lazily_on_first_statement(self):
        adapter = SQLiteAdapter(":memory:")
        assert adapter.ping() is True
        assert adapter.is_connected is True
        adapter.disconnect()

    def test_connect_twice_keeps_database(self, adapter):
        adapter.connect()
        assert adapter.run_query("SELECT COUNT(*) FROM items").rows[0][0] == 0

    @patch("sqlite3.connect", side_effect=sqlite3.OperationalError("unable to open database"))
    def test_connect_failure_raises(self, mock_connect):
        adapter = SQLiteAdapter(path="/nonexistent/path.db")
        with pytest.raises(DatabaseConnectionError):
            adapter.connect()

    def test_disconnect_when_not_connected(self):
        adapter = SQLiteAdapter()
        adapter.disconnect()
        assert adapter.is_connected is False

    def test_context_manager(self):
        with SQLiteAdapter(":memory:") as adapter:
            assert adapter.is_connected is True
        assert adapter.is_connected is False


class TestSQLiteAdapterStatements:
    def test_run_statement_returns_generated_key(self, adapter):
        first = adapter.run_statement("INSERT INTO items (name) VALUES (?)", ["a"])
        second = adapter.run_statement("INSERT INTO items (name) VALUES (?)", ["b"])
        assert first.rows_affected == 1
        assert first.last_insert_id == 1
        assert second.last_insert_id == 2

    def test_run_query_returns_columns_and_rows(self, adapter):
        adapter.run_statement("INSERT INTO items (name) VALUES (?)", ["a"])
        result = adapter.run_query("SELECT id, name FROM items WHERE name = ?", ["a"])
        assert isinstance(result, QueryResult)
        assert result.columns == ("id", "name")
        assert result.rows == [(1, "a")]
        assert result.as_dicts() == [{"id": 1, "name": "a"}]

    def test_update_reports_rows_affected(self, adapter):
        adapter.run_statement("INSERT INTO items (name) VALUES (?)", ["a"])
        adapter.run_statement("INSERT INTO items (name) VALUES (?)", ["b"])
        result = adapter.run_statement("UPDATE items SET name = ?", ["c"])
        assert result.rows_affected == 2

    def test_statement_failure_wraps_driver_error(self, adapter):
        with pytest.raises(ExecutionError) as exc_info:
            adapter.run_query("SELECT * FROM missing_table")
        assert isinstance(exc_info.value.cause, sqlite3.OperationalError)
        assert "missing_table" in exc_info.value.message

    def test_failed_statement_is_rolled_back(self, adapter):
        with pytest.raises(ExecutionError):
            adapter.run_statement("INSERT INTO items (name) VALUES (?)", [None])
        assert adapter.run_query("SELECT COUNT(*) FROM items").rows[0][0] == 0

    def test_closed_connection_raises_connection_error(self, adapter):
        adapter._conn.close()
        with pytest.raises(DatabaseConnectionError):
            adapter.run_query("SELECT 1")

    def test_cursor_close_failure_keeps_statement_error(self, adapter):
        cursor = MagicMock()
        cursor.execute.side_effect = sqlite3.OperationalError("disk I/O error")
        cursor.close.side_effect = sqlite3.ProgrammingError("Cannot operate on a closed cursor.")
        with patch.object(adapter, "_cursor", return_value=cursor):
            with pytest.raises(ExecutionError, match="disk I/O error") as exc_info:
                adapter.run_query("SELECT 1")
        assert isinstance(exc_info.value.cause, sqlite3.OperationalError)

    def test_cursor_close_failure_after_success_is_logged(self, adapter):
        cursor = MagicMock()
        cursor.fetchall.return_value = [(1,)]
        cursor.description = [("one",)]
        cursor.close.side_effect = sqlite3.ProgrammingError("Cannot operate on a closed cursor.")
        with patch.object(adapter, "_cursor", return_value=cursor), capture_logs() as logs:
            result = adapter.run_query("SELECT 1")
        assert result.rows == [(1,)]
        assert any(entry["event"] == "db.cursor_close_failed" for entry in logs)


class TestSQLiteAdapterConcurrency:
    def test_concurrent_inserts(self, adapter):
        def worker(n: int) -> None:
            for i in range(20):
                adapter.run_statement("INSERT INTO items (name) VALUES (?)", [f"{n}-{i}"])

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert adapter.run_query("SELECT COUNT(*) FROM items").rows[0][0] == 160
