"""Statement builder: structured query inputs -> parameterized SQL.

Manifesto:
    The structured read path never interpolates values. Callers hand over
    condition fragments that carry ``?`` placeholders plus one flat list of
    parameters; the builder concatenates the fragments with ``AND`` and
    refuses to build when the placeholder count and the parameter count
    disagree. Nothing is parsed or rewritten: fragments, ORDER BY, GROUP BY
    and HAVING are developer-authored text and appear verbatim.

    That trust boundary is the caller's to keep. Text that reaches
    ``columns``, ``conditions``, ``order_by``, ``group_by`` or ``having``
    from an end user is an injection vector.

Architecture::

    QuerySpec ──build_select()──► BuiltStatement(sql, params)

    SELECT <cols> FROM <table>
      [WHERE c1 AND c2 ...]
      [GROUP BY ...] [HAVING ...] [ORDER BY ...]
      [LIMIT ? OFFSET ?]               # only when limit > 0

    record ──build_insert()──► INSERT INTO <table> (c1, c2) VALUES (?, ?)

Guardrails:
    ❌ ``conditions=[f"token_hash = '{h}'"]``
    ✅ ``conditions=["token_hash = ?"], params=[h]``
    ❌ ``limit=0`` expecting "no rows"    (0 means no LIMIT clause)

Tags:
    shiftline, sql, builder, parameterized-queries
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from shiftline.core.errors import BuildError
from shiftline.db.mapper import describe, encode_record

PLACEHOLDER = "?"

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")
_QUOTES = ("'", '"', "`")


@dataclass
class QuerySpec:
    """Inputs of one structured SELECT. Built per call, then discarded."""

    table: str
    record_type: type | None = None
    all_columns: bool = True
    columns: Sequence[str] | None = None
    conditions: Sequence[str] = field(default_factory=tuple)
    params: Sequence[Any] = field(default_factory=tuple)
    order_by: str = ""
    limit: int = 0
    offset: int = 0
    group_by: str = ""
    having: str = ""


@dataclass(frozen=True)
class BuiltStatement:
    """SQL text plus the parameters bound to its placeholders, in order."""

    sql: str
    params: tuple[Any, ...]


def count_placeholders(sql: str) -> int:
    """
    Count ``?`` placeholders outside quoted literals.

    Handles ``'...'``, ``"..."`` and backtick-quoted text, including doubled
    quotes (``'it''s'``) and, inside single or double quotes, backslash
    escapes (``'it\\'s'``).
    """
    count = 0
    quote: str | None = None
    i = 0
    n = len(sql)
    while i < n:
        ch = sql[i]
        if quote is not None:
            if ch == "\\" and quote != "`":
                i += 1
            elif ch == quote:
                if i + 1 < n and sql[i + 1] == quote:
                    i += 1
                else:
                    quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch == PLACEHOLDER:
            count += 1
        i += 1
    return count


def is_identifier(name: str) -> bool:
    """Plain, optionally schema-qualified, table identifier."""
    return bool(_IDENT_RE.match(name))


def _column_clause(spec: QuerySpec) -> str:
    if spec.all_columns:
        if spec.record_type is not None:
            return ", ".join(describe(spec.record_type).column_names)
        return "*"
    columns = [c.strip() for c in (spec.columns or ()) if c and c.strip()]
    if not columns:
        raise BuildError("Explicit column projection requested with no columns")
    return ", ".join(columns)


def build_select(spec: QuerySpec) -> BuiltStatement:
    """
    Build a parameterized SELECT.

    Raises:
        BuildError: empty table, empty projection, negative or orphaned
            limit/offset, or placeholder/parameter count mismatch.
    """
    table = spec.table.strip() if spec.table else ""
    if not table:
        raise BuildError("Table reference is empty")
    if spec.limit < 0 or spec.offset < 0:
        raise BuildError(f"limit and offset must be >= 0 (limit={spec.limit}, offset={spec.offset})")
    if spec.offset > 0 and spec.limit == 0:
        raise BuildError("offset requires a limit > 0")

    parts = [f"SELECT {_column_clause(spec)} FROM {table}"]

    conditions = [c.strip() for c in spec.conditions if c and c.strip()]
    if conditions:
        parts.append("WHERE " + " AND ".join(conditions))
    if spec.group_by.strip():
        parts.append(f"GROUP BY {spec.group_by.strip()}")
    if spec.having.strip():
        parts.append(f"HAVING {spec.having.strip()}")
    if spec.order_by.strip():
        parts.append(f"ORDER BY {spec.order_by.strip()}")

    sql = " ".join(parts)
    params = list(spec.params)
    expected = count_placeholders(sql)
    if expected != len(params):
        raise BuildError(
            f"Placeholder count ({expected}) does not match parameter count ({len(params)})"
        ).with_context(table=table, operation="select")

    if spec.limit > 0:
        sql += " LIMIT ? OFFSET ?"
        params.extend([spec.limit, spec.offset])

    return BuiltStatement(sql=sql, params=tuple(params))


def build_insert(table: str, record: Any) -> BuiltStatement:
    """Build ``INSERT INTO table (c1, ...) VALUES (?, ...)`` from a record."""
    table = table.strip() if table else ""
    if not is_identifier(table):
        raise BuildError(f"Insert table must be a plain identifier: {table!r}")
    columns, values = encode_record(record)
    placeholders = ", ".join(PLACEHOLDER for _ in columns)
    sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"
    return BuiltStatement(sql=sql, params=tuple(values))


__all__ = [
    "BuiltStatement",
    "PLACEHOLDER",
    "QuerySpec",
    "build_insert",
    "build_select",
    "count_placeholders",
    "is_identifier",
]
