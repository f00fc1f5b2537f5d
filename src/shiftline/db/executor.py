"""Query executor: the role-scoped data-access entry point.

Manifesto:
    Feature code talks to the database through four calls, each one
    synchronous round-trip on the connection pool of the named role:

    - ``insert``            record -> INSERT, returns the generated key
    - ``select``            structured SELECT, rows decoded into records
    - ``select_primitive``  hand-written SELECT, denylist-filtered first
    - ``execute_sql``       trusted internal UPDATE/DELETE/DDL, unfiltered

    Two safety tiers: the structured path is safe by construction (values
    only ever travel as bound parameters), the raw path is guarded by the
    ``UnsafeSQLFilter`` heuristic. ``execute_sql`` is for code paths whose
    SQL is written by developers, never by end users.

    Nothing retries. A failed statement raises straight to the caller and
    the destination list is left exactly as it was.

Architecture::

    QueryExecutor
      ├── RoleRegistry.resolve(role)     -> DatabaseAdapter
      ├── build_select / build_insert    -> BuiltStatement
      ├── UnsafeSQLFilter.check(sql)     (select_primitive only)
      ├── adapter.run_query / run_statement
      └── decode_rows(record_type, ...)  -> dest[:] = rows

Guardrails:
    ❌ ``executor.execute_sql(role, f"UPDATE t SET x = {value}")``
    ✅ ``executor.execute_sql(role, "UPDATE t SET x = ? WHERE id = ?", value, id)``
    ❌ Retrying a failed ``insert`` (not idempotent)
    ✅ Let the error propagate; the caller decides

Tags:
    shiftline, executor, data-access, roles, sql

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any, TypeVar

from shiftline.core.adapters import DatabaseAdapter, StatementResult
from shiftline.core.errors import BuildError, ShiftlineError, UnsafeQueryError
from shiftline.core.logging import get_logger
from shiftline.core.timing import log_db_operation
from shiftline.db.builder import QuerySpec, build_insert, build_select
from shiftline.db.mapper import decode_rows, describe
from shiftline.db.roles import Role, RoleRegistry
from shiftline.db.sqlfilter import UnsafeSQLFilter

logger = get_logger(__name__)

T = TypeVar("T")

RAW_TABLE = "<raw>"


def _role_name(role: Role | str) -> str:
    return role.value if isinstance(role, Role) else str(role)


@contextmanager
def _error_context(operation: str, role: Role | str, table: str) -> Iterator[None]:
    """Stamp role/table/operation onto any shiftline error raised inside."""
    try:
        yield
    except ShiftlineError as e:
        e.with_context(role=_role_name(role), table=table, operation=operation)
        raise


class QueryExecutor:
    """
    Role-scoped SQL access.

    Args:
        registry: Role -> adapter mapping, built once at startup.
        sql_filter: Denylist filter for ``select_primitive``. Defaults to
            the built-in denylist.
    """

    def __init__(self, registry: RoleRegistry, sql_filter: UnsafeSQLFilter | None = None):
        self._registry = registry
        self._filter = sql_filter or UnsafeSQLFilter()

    @property
    def registry(self) -> RoleRegistry:
        return self._registry

    @property
    def sql_filter(self) -> UnsafeSQLFilter:
        return self._filter

    def _adapter(self, role: Role | str) -> DatabaseAdapter:
        return self._registry.resolve(role)

    # ── Insert ───────────────────────────────────────────────────────────

    def insert(self, role: Role | str, table: str, record: Any) -> int | None:
        """
        Insert one record and return the store-generated key.

        Generated columns (``column(..., generated=True)``) left as ``None``
        are omitted so the store assigns them.
        """
        with _error_context("insert", role, table):
            adapter = self._adapter(role)
            statement = build_insert(table, record)
            with log_db_operation("insert", table, role=_role_name(role)) as timer:
                result = adapter.run_statement(statement.sql, statement.params)
                timer.add_metric("rows_affected", result.rows_affected)
        return result.last_insert_id

    # ── Structured select ────────────────────────────────────────────────

    def select(
        self,
        role: Role | str,
        table: str,
        dest: list[T] | None,
        record_type: type[T],
        *,
        all_columns: bool = True,
        columns: Sequence[str] | None = None,
        conditions: Sequence[str] = (),
        params: Sequence[Any] = (),
        order_by: str = "",
        limit: int = 0,
        offset: int = 0,
        group_by: str = "",
        having: str = "",
    ) -> list[T]:
        """
        Structured SELECT into ``dest``.

        ``dest`` is replaced in place (never appended to) once every row has
        decoded; on any error it is left untouched. The decoded list is also
        returned.

        Example:
            tokens: list[Token] = []
            executor.select(
                Role.ADMIN, "tokens", tokens, Token,
                conditions=["token_revoked = ?", "token_expiry < ?"],
                params=[False, "2023-01-01 00:00:00"],
                order_by="token_expiry ASC",
                limit=10,
            )
        """
        spec = QuerySpec(
            table=table,
            record_type=record_type,
            all_columns=all_columns,
            columns=columns,
            conditions=conditions,
            params=params,
            order_by=order_by,
            limit=limit,
            offset=offset,
            group_by=group_by,
            having=having,
        )
        return self.select_spec(role, spec, dest)

    def select_spec(self, role: Role | str, spec: QuerySpec, dest: list[T] | None = None) -> list[T]:
        """Structured SELECT from a prebuilt ``QuerySpec``."""
        with _error_context("select", role, spec.table):
            if spec.record_type is None:
                raise BuildError("QuerySpec.record_type is required to decode rows")
            adapter = self._adapter(role)
            descriptor = describe(spec.record_type)
            statement = build_select(spec)
            with log_db_operation("select", spec.table, role=_role_name(role)) as timer:
                result = adapter.run_query(statement.sql, statement.params)
                timer.add_metric("rows", len(result.rows))
            rows = decode_rows(descriptor, result.columns, result.rows)
        return _fill(dest, rows)

    # ── Raw select ───────────────────────────────────────────────────────

    def select_primitive(
        self,
        role: Role | str,
        sql: str,
        params: Sequence[Any],
        dest: list[T] | None,
        record_type: type[T],
    ) -> list[T]:
        """
        Run hand-written SELECT text after the denylist check.

        Rejected text raises ``UnsafeQueryError`` and never reaches a
        connection. Rows decode exactly as in :meth:`select`.
        """
        with _error_context("select_primitive", role, RAW_TABLE):
            adapter = self._adapter(role)
            descriptor = describe(record_type)
            try:
                self._filter.check(sql)
            except UnsafeQueryError as e:
                logger.warning(
                    "db.unsafe_sql_rejected",
                    role=_role_name(role),
                    pattern=e.pattern,
                )
                raise
            with log_db_operation("select_primitive", RAW_TABLE, role=_role_name(role)) as timer:
                result = adapter.run_query(sql, tuple(params))
                timer.add_metric("rows", len(result.rows))
            rows = decode_rows(descriptor, result.columns, result.rows)
        return _fill(dest, rows)

    # ── Trusted statements ───────────────────────────────────────────────

    def execute_sql(self, role: Role | str, sql: str, *params: Any) -> StatementResult:
        """
        Execute a trusted statement (UPDATE/DELETE/DDL) without filtering.

        Only for SQL written by developers; values still go in ``params``.
        """
        with _error_context("execute_sql", role, RAW_TABLE):
            adapter = self._adapter(role)
            with log_db_operation("execute_sql", RAW_TABLE, role=_role_name(role)) as timer:
                result = adapter.run_statement(sql, params)
                timer.add_metric("rows_affected", result.rows_affected)
        return result


def _fill(dest: list[T] | None, rows: list[T]) -> list[T]:
    if dest is None:
        return rows
    dest[:] = rows
    return dest


__all__ = [
    "QueryExecutor",
]
