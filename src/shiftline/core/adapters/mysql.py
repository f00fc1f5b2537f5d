"""MySQL database adapter.

Uses ``mysql.connector`` from the ``mysql-connector-python`` package with a
``MySQLConnectionPool``. Statements run on server-side prepared cursors,
which take the same qmark (``?``) placeholders the statement builder emits,
so SQL text is passed through untouched.

This adapter is import-guarded: if ``mysql.connector`` is not importable a
clear :class:`~shiftline.core.errors.ConfigurationError` is raised at
``connect()`` time.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from shiftline.core.errors import ConfigurationError, DatabaseConnectionError
from shiftline.core.logging import get_logger
from shiftline.core.protocols import Connection, Cursor

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)

# CR_SERVER_GONE_ERROR, CR_SERVER_LOST, CR_SERVER_LOST_EXTENDED
_LOST_CONNECTION_ERRNOS = frozenset({2006, 2013, 2055})


class MySQLAdapter(DatabaseAdapter):
    """MySQL / MariaDB database adapter backed by a connection pool."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 3306,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        pool_size: int = 5,
        connect_timeout: int = 10,
        pool_name: str | None = None,
        charset: str = "utf8mb4",
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.MYSQL,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            pool_size=pool_size,
            connect_timeout=connect_timeout,
            options={**kwargs, "charset": charset},
        )
        super().__init__(config)
        self._pool_name = pool_name or f"shiftline_{id(self):x}"
        self._pool: Any = None
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> MySQLAdapter:
        return cls(
            host=config.host,
            port=config.port,
            database=config.database,
            username=config.username,
            password=config.password,
            pool_size=config.pool_size,
            connect_timeout=config.connect_timeout,
            **config.options,
        )

    def connect(self) -> None:
        """Create the MySQL connection pool."""
        try:
            from mysql.connector import pooling
        except ImportError:
            raise ConfigurationError(
                "mysql-connector-python is required for MySQL. "
                "Install with: pip install mysql-connector-python"
            ) from None

        options = dict(self._config.options)
        charset = options.pop("charset", "utf8mb4")
        try:
            self._pool = pooling.MySQLConnectionPool(
                pool_name=self._pool_name,
                pool_size=self._config.pool_size,
                host=self._config.host,
                port=self._config.port,
                database=self._config.database,
                user=self._config.username,
                password=self._config.password,
                charset=charset,
                connection_timeout=self._config.connect_timeout,
                autocommit=False,
                **options,
            )
            self._connected = True
        except Exception as e:
            raise DatabaseConnectionError(
                f"Failed to connect to MySQL: {e}",
                cause=e,
            ) from e

    def disconnect(self) -> None:
        """Drop the pool; pooled connections close as they are returned."""
        self._pool = None
        self._connected = False

    @contextmanager
    def checkout(self) -> Iterator[Connection]:
        """Borrow a pooled connection; ``close()`` hands it back to the pool."""
        with self._lock:
            if self._pool is None:
                self.connect()
            pool = self._pool

        from mysql.connector import errors as mysql_errors

        try:
            conn = pool.get_connection()
        except mysql_errors.PoolError as e:
            raise DatabaseConnectionError(
                f"MySQL pool exhausted: {e}",
                cause=e,
            ) from e
        except mysql_errors.Error as e:
            raise DatabaseConnectionError(
                f"Failed to obtain MySQL connection: {e}",
                cause=e,
            ) from e

        try:
            yield conn
        finally:
            try:
                conn.close()
            except mysql_errors.Error as e:
                logger.warning("db.connection_release_failed", error_type=type(e).__name__, error=str(e))

    def _cursor(self, conn: Connection) -> Cursor:
        return conn.cursor(prepared=True)  # type: ignore[call-arg]

    def _is_connection_failure(self, exc: BaseException) -> bool:
        from mysql.connector import errors as mysql_errors

        if isinstance(exc, (mysql_errors.OperationalError, mysql_errors.InterfaceError)):
            return getattr(exc, "errno", None) in _LOST_CONNECTION_ERRNOS
        return False


__all__ = [
    "MySQLAdapter",
]
