"""Database adapter base class.

Manifesto:
    Every role resolves to one adapter, and every adapter owns a pool of
    connections. The base class defines the round-trip contract the query
    executor depends on, so the executor never touches a driver module:

    - ``run_query()``      → column names + rows
    - ``run_statement()``  → rows affected + generated key

    Each call checks a connection out of the pool, runs exactly one
    statement, commits (or rolls back on failure) and returns the
    connection. No transaction spans two calls.

Features:
    - Abstract ``connect()``, ``disconnect()``, ``checkout()``
    - Driver failures translated once, here: connection problems become
      ``DatabaseConnectionError``, statement failures ``ExecutionError``
    - Context-manager protocol for connection lifecycle

Tags:
    shiftline, database, abstract-base, adapter-pattern

Doc-Types:
    api-reference
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from shiftline.core.errors import DatabaseConnectionError, ExecutionError
from shiftline.core.logging import get_logger
from shiftline.core.protocols import Connection, Cursor

from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)


@dataclass(frozen=True)
class QueryResult:
    """Rows returned by a read statement, with their column names."""

    columns: tuple[str, ...]
    rows: list[Sequence[Any]] = field(default_factory=list)

    def as_dicts(self) -> list[dict[str, Any]]:
        """Rows keyed by column name."""
        return [dict(zip(self.columns, row, strict=False)) for row in self.rows]


@dataclass(frozen=True)
class StatementResult:
    """Outcome of a mutating statement."""

    rows_affected: int
    last_insert_id: int | None = None


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    Subclasses provide the pool (``connect``/``disconnect``/``checkout``) and
    may override ``_cursor`` and ``_is_connection_failure`` for driver
    specifics. Adapters are shared across threads; ``checkout`` must be safe
    for concurrent use.
    """

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._connected = False

    @classmethod
    @abstractmethod
    def from_config(cls, config: DatabaseConfig) -> DatabaseAdapter:
        """Build an adapter from a ``DatabaseConfig``."""
        ...

    @property
    def config(self) -> DatabaseConfig:
        """Connection configuration."""
        return self._config

    @property
    def db_type(self) -> DatabaseType:
        """Database type."""
        return self._config.db_type

    @property
    def is_connected(self) -> bool:
        """Whether adapter is connected."""
        return self._connected

    @abstractmethod
    def connect(self) -> None:
        """Establish the connection pool."""
        ...

    @abstractmethod
    def disconnect(self) -> None:
        """Close the connection pool."""
        ...

    @abstractmethod
    @contextmanager
    def checkout(self) -> Iterator[Connection]:
        """Check a connection out of the pool for the duration of the block."""
        ...

    def _cursor(self, conn: Connection) -> Cursor:
        """Open the cursor statements run on."""
        return conn.cursor()

    def _is_connection_failure(self, exc: BaseException) -> bool:
        """Whether a driver error means the connection itself is unusable."""
        return False

    @contextmanager
    def _statement(self) -> Iterator[Cursor]:
        """Run one statement on a pooled connection, committing on success."""
        with self.checkout() as conn:
            cursor: Cursor | None = None
            try:
                cursor = self._cursor(conn)
                yield cursor
                conn.commit()
            except Exception as e:
                self._rollback(conn)
                if self._is_connection_failure(e):
                    raise DatabaseConnectionError(
                        f"Connection lost while executing statement: {e}",
                        cause=e,
                    ) from e
                raise ExecutionError(f"Statement failed: {e}", cause=e) from e
            finally:
                if cursor is not None:
                    self._close_cursor(cursor)

    def _close_cursor(self, cursor: Cursor) -> None:
        try:
            cursor.close()
        except Exception as e:
            logger.warning("db.cursor_close_failed", error_type=type(e).__name__, error=str(e))

    def _rollback(self, conn: Connection) -> None:
        try:
            conn.rollback()
        except Exception as e:
            logger.warning("db.rollback_failed", error_type=type(e).__name__, error=str(e))

    def run_query(self, sql: str, params: Sequence[Any] = ()) -> QueryResult:
        """Execute a read statement and return every row."""
        with self._statement() as cursor:
            cursor.execute(sql, tuple(params))
            rows = cursor.fetchall()
            description = cursor.description or ()
            columns = tuple(desc[0] for desc in description)
        return QueryResult(columns=columns, rows=list(rows))

    def run_statement(self, sql: str, params: Sequence[Any] = ()) -> StatementResult:
        """Execute a mutating statement."""
        with self._statement() as cursor:
            cursor.execute(sql, tuple(params))
            rows_affected = cursor.rowcount
            last_insert_id = cursor.lastrowid
        return StatementResult(
            rows_affected=rows_affected,
            last_insert_id=last_insert_id or None,
        )

    def ping(self) -> bool:
        """Round-trip ``SELECT 1``; raises on failure."""
        result = self.run_query("SELECT 1")
        return bool(result.rows) and result.rows[0][0] == 1

    def __enter__(self) -> DatabaseAdapter:
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.disconnect()


__all__ = [
    "DatabaseAdapter",
    "QueryResult",
    "StatementResult",
]
