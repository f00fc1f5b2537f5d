"""Database adapters -- the per-role connection pool primitive.

Manifesto:
    The data-access layer needs one thing from a database: check out a
    pooled connection, run one parameterized statement, hand the
    connection back. Adapters provide exactly that, for SQLite (development
    and tests) and MySQL (production), so the executor never imports a
    driver.

    Each adapter is **import-guarded** where the driver is optional: the
    MySQL driver is only required at ``connect()`` time.

Architecture::

    DatabaseAdapter (base.py)        Abstract pool: connect/checkout/run_*
        |-- SQLiteAdapter            stdlib sqlite3, pool of one
        |-- MySQLAdapter             mysql.connector pooling

    AdapterRegistry (registry.py)    backend name -> adapter class
    DatabaseConfig (types.py)        connection parameters
    DatabaseType (types.py)          Enum of supported backends

Guardrails:
    ❌ ``adapter.run_query("SELECT * FROM t WHERE id=" + user_input)``
    ✅ ``adapter.run_query("SELECT * FROM t WHERE id = ?", [user_input])``
    ❌ ``adapter = MySQLAdapter(...)`` in feature code
    ✅ ``registry.resolve(Role.ADMIN)``

Tags:
    shiftline, database, adapters, connection-pool, registry-pattern
"""

from .base import DatabaseAdapter, QueryResult, StatementResult
from .mysql import MySQLAdapter
from .registry import AdapterRegistry, adapter_registry, create_adapter
from .sqlite import SQLiteAdapter
from .types import DatabaseConfig, DatabaseType

__all__ = [
    "DatabaseType",
    "DatabaseConfig",
    "DatabaseAdapter",
    "QueryResult",
    "StatementResult",
    "SQLiteAdapter",
    "MySQLAdapter",
    "AdapterRegistry",
    "adapter_registry",
    "create_adapter",
]
