"""
Canonical protocol definitions for shiftline.

Adapters hand out DB-API 2.0 connections from their pools; these protocols
describe the subset of PEP 249 the adapters rely on so that ``sqlite3`` and
``mysql.connector`` connections (and test doubles) are interchangeable.

Guardrails:
    ❌ DON'T: Redefine a connection protocol in another module
    ✅ DO: Import from shiftline.core.protocols
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Cursor(Protocol):
    """Minimal PEP 249 cursor."""

    description: Sequence[Sequence[Any]] | None
    rowcount: int
    lastrowid: Any

    def execute(self, operation: str, params: Sequence[Any] = ...) -> Any:
        """Execute one statement with positional parameters."""
        ...

    def fetchall(self) -> list[Sequence[Any]]:
        """Fetch every remaining row."""
        ...

    def close(self) -> None:
        """Release the cursor."""
        ...


@runtime_checkable
class Connection(Protocol):
    """Minimal SYNCHRONOUS PEP 249 connection."""

    def cursor(self) -> Cursor:
        """Open a cursor on this connection."""
        ...

    def commit(self) -> None:
        """Commit the current transaction."""
        ...

    def rollback(self) -> None:
        """Roll back the current transaction."""
        ...

    def close(self) -> None:
        """Close the connection (returns it to the pool for pooled drivers)."""
        ...


__all__ = [
    "Cursor",
    "Connection",
]
