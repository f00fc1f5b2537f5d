"""SQLite database adapter."""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from shiftline.core.errors import DatabaseConnectionError
from shiftline.core.protocols import Connection

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter.

    Uses the built-in sqlite3 module with one shared connection behind a
    lock, i.e. a pool of size one. Suitable for:
    - Development and testing
    - Single-process deployments
    """

    def __init__(
        self,
        path: str = ":memory:",
        *,
        timeout: float = 5.0,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.SQLITE,
            path=path,
            options=kwargs,
        )
        super().__init__(config)
        self._timeout = timeout
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> SQLiteAdapter:
        return cls(
            path=config.path or ":memory:",
            timeout=float(config.connect_timeout),
            **config.options,
        )

    def connect(self) -> None:
        """Connect to SQLite database. No-op when already connected."""
        if self._conn is not None:
            return
        path = self._config.path or ":memory:"
        uri = path.startswith("file:")

        try:
            self._conn = sqlite3.connect(
                path,
                timeout=self._timeout,
                check_same_thread=False,
                uri=uri,
            )
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._connected = True

        except sqlite3.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to SQLite: {e}",
                cause=e,
            ) from e

    def disconnect(self) -> None:
        """Close SQLite connection."""
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None
            self._connected = False

    @contextmanager
    def checkout(self) -> Iterator[Connection]:
        """Hold the shared connection for one statement."""
        with self._lock:
            if self._conn is None:
                self.connect()
            yield self._conn  # type: ignore[misc]

    def _is_connection_failure(self, exc: BaseException) -> bool:
        return isinstance(exc, sqlite3.ProgrammingError) and "closed" in str(exc).lower()


__all__ = [
    "SQLiteAdapter",
]
