"""
Shared pytest fixtures for shiftline tests.

This module provides:
- An in-memory SQLite adapter shared by the ``admin`` and ``driver`` roles
- A ``QueryExecutor`` over that registry with the ``tokens`` and
  ``car_isusing`` tables created

Usage:
    def test_something(executor):
        executor.execute_sql(Role.ADMIN, "DELETE FROM tokens")
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog

from shiftline.core.adapters import SQLiteAdapter
from shiftline.db import QueryExecutor, Role, RoleRegistry

TOKENS_DDL = """
CREATE TABLE tokens (
    token_id INTEGER PRIMARY KEY AUTOINCREMENT,
    token_hash TEXT NOT NULL,
    token_revoked INTEGER NOT NULL DEFAULT 0,
    token_expiry TEXT NOT NULL
)
"""

CAR_ISUSING_DDL = """
CREATE TABLE car_isusing (
    car_id TEXT PRIMARY KEY,
    car_isusing TEXT NOT NULL
)
"""


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo logging configuration done by the CLI or app startup."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def sqlite_adapter() -> Iterator[SQLiteAdapter]:
    adapter = SQLiteAdapter(":memory:")
    yield adapter
    adapter.disconnect()


@pytest.fixture
def registry(sqlite_adapter: SQLiteAdapter) -> RoleRegistry:
    """Both roles on one in-memory database."""
    return RoleRegistry({Role.ADMIN: sqlite_adapter, Role.DRIVER: sqlite_adapter})


@pytest.fixture
def executor(registry: RoleRegistry) -> QueryExecutor:
    ex = QueryExecutor(registry)
    ex.execute_sql(Role.ADMIN, TOKENS_DDL)
    ex.execute_sql(Role.ADMIN, CAR_ISUSING_DDL)
    return ex
