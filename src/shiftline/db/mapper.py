"""Record mapper: dataclass fields <-> table columns.

Manifesto:
    Feature modules persist plain dataclasses. Each public field names its
    column with ``column("token_hash")``; the mapper reads those tags once
    per type into a ``RecordDescriptor`` and reuses it for every row.

    A public field without a tag is an error, not a silently skipped
    column: an INSERT that quietly drops a field is the bug this module
    exists to prevent.

Architecture::

    @dataclass(kw_only=True)
    class Token:
        token_id: int | None = column("token_id", generated=True)
        token_hash: str = column("token_hash")

    describe(Token)          -> RecordDescriptor (cached per type)
    encode_record(token)     -> (["token_hash"], ["abc"])   # generated id omitted while None
    decode_row(Token, row)   -> Token(...)                  # unknown columns ignored

Guardrails:
    ❌ ``token_hash: str = ""``                  (untagged public field)
    ✅ ``token_hash: str = column("token_hash")``
    ❌ ``column("TokenHash")``                   (not lower snake case)

Tags:
    shiftline, mapper, dataclasses, reflection, records

Doc-Types:
    api-reference
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import re
import sys
import types
import typing
from collections.abc import Mapping, Sequence
from dataclasses import MISSING, dataclass
from decimal import Decimal
from functools import lru_cache
from typing import Any, TypeVar

from shiftline.core.errors import MappingError

T = TypeVar("T")

COLUMN_KEY = "column"
GENERATED_KEY = "generated"

_COLUMN_NAME_RE = re.compile(r"^[a-z][a-z0-9_]*$")
_TRUE_STRINGS = frozenset({"1", "true", "t", "yes", "y"})


def column(
    name: str,
    *,
    generated: bool = False,
    default: Any = MISSING,
    default_factory: Any = MISSING,
    **kwargs: Any,
) -> Any:
    """
    Declare the column a dataclass field maps to.

    Args:
        name: Column name (lower snake case).
        generated: Store-generated column (auto-increment key). Omitted from
            INSERT while the field is ``None``; defaults the field to ``None``.
        default: Field default.
        default_factory: Field default factory.
        **kwargs: Passed through to ``dataclasses.field``.
    """
    if generated and default is MISSING and default_factory is MISSING:
        default = None
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[COLUMN_KEY] = name
    metadata[GENERATED_KEY] = generated
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata=metadata,
        **kwargs,
    )


@dataclass(frozen=True)
class ColumnSpec:
    """One mapped field."""

    name: str
    field_name: str
    type: Any
    optional: bool
    generated: bool
    init: bool
    default: Any = MISSING
    default_factory: Any = MISSING

    def missing_value(self) -> Any:
        """Value for a column absent from the row."""
        if self.default is not MISSING:
            return self.default
        if self.default_factory is not MISSING:
            return self.default_factory()
        if self.optional:
            return None
        return _zero_value(self.type)


@dataclass(frozen=True)
class RecordDescriptor:
    """Column map for one record type, in field declaration order."""

    record_type: type
    columns: tuple[ColumnSpec, ...]

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.columns)

    def by_name(self) -> dict[str, ColumnSpec]:
        return {c.name: c for c in self.columns}


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        optional = len(args) != len(typing.get_args(annotation))
        if len(args) == 1:
            return args[0], optional
        return Any, optional
    return annotation, False


def _zero_value(target: Any) -> Any:
    if target is bool:
        return False
    if target is int:
        return 0
    if target is float:
        return 0.0
    if target is str:
        return ""
    if target is Decimal:
        return Decimal(0)
    if target is bytes:
        return b""
    return None


def _resolve_annotations(record_type: type) -> dict[str, Any]:
    """
    Field annotations of a dataclass, evaluated.

    One unresolvable annotation (a name imported only under
    ``TYPE_CHECKING``) degrades that field to ``Any``; every other field
    keeps its real type.
    """
    try:
        return typing.get_type_hints(record_type)
    except (NameError, TypeError):
        pass

    module = sys.modules.get(record_type.__module__)
    globalns = dict(vars(module)) if module is not None else {}
    localns = dict(vars(record_type))
    hints: dict[str, Any] = {}
    for f in dataclasses.fields(record_type):
        annotation = f.type
        if isinstance(annotation, str):
            try:
                annotation = eval(annotation, globalns, localns)  # noqa: S307
            except (NameError, TypeError, AttributeError, SyntaxError):
                annotation = Any
        hints[f.name] = annotation
    return hints


@lru_cache(maxsize=None)
def describe(record_type: type) -> RecordDescriptor:
    """
    Build (once) the column map for a dataclass record type.

    Raises:
        MappingError: not a dataclass, untagged public field, bad or
            duplicate column name, or no mapped columns.
    """
    if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
        raise MappingError(
            f"Record type must be a dataclass: {record_type!r}",
            record_type=record_type if isinstance(record_type, type) else None,
        )

    hints = _resolve_annotations(record_type)

    type_name = record_type.__name__
    specs: list[ColumnSpec] = []
    seen: dict[str, str] = {}
    for f in dataclasses.fields(record_type):
        name = f.metadata.get(COLUMN_KEY)
        if name is None:
            if f.name.startswith("_"):
                continue
            raise MappingError(
                f"{type_name}.{f.name} has no column tag; use column(\"...\")",
                record_type=record_type,
            )
        if not isinstance(name, str) or not _COLUMN_NAME_RE.match(name):
            raise MappingError(
                f"{type_name}.{f.name}: column {name!r} is not a lower snake case identifier",
                record_type=record_type,
            )
        if name in seen:
            raise MappingError(
                f"{type_name}.{f.name}: column {name!r} already mapped by {seen[name]}",
                record_type=record_type,
            )
        seen[name] = f.name

        annotation = hints.get(f.name, f.type if not isinstance(f.type, str) else Any)
        target, optional = _unwrap_optional(annotation)
        specs.append(
            ColumnSpec(
                name=name,
                field_name=f.name,
                type=target,
                optional=optional,
                generated=bool(f.metadata.get(GENERATED_KEY, False)),
                init=f.init,
                default=f.default,
                default_factory=f.default_factory,
            )
        )

    if not specs:
        raise MappingError(f"{type_name} has no mapped columns", record_type=record_type)
    return RecordDescriptor(record_type=record_type, columns=tuple(specs))


def _to_bool(value: Any) -> bool:
    if isinstance(value, (bytes, bytearray)):
        return int.from_bytes(value, "big") != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _to_str(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


def _to_int(value: Any) -> int:
    if isinstance(value, (bytes, bytearray)):
        return int.from_bytes(value, "big")
    if isinstance(value, str):
        return int(value.strip())
    return int(value)


def _to_datetime(value: Any) -> dt.datetime:
    if isinstance(value, dt.datetime):
        return value
    if isinstance(value, dt.date):
        return dt.datetime(value.year, value.month, value.day)
    return dt.datetime.fromisoformat(_to_str(value))


def _to_date(value: Any) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    return dt.date.fromisoformat(_to_str(value)[:10])


def _to_float(value: Any) -> float:
    if isinstance(value, (bytes, bytearray)):
        return float(_to_str(value))
    return float(value)


def _to_decimal(value: Any) -> Decimal:
    return Decimal(_to_str(value))


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


_CONVERTERS: dict[type, typing.Callable[[Any], Any]] = {
    bool: _to_bool,
    int: _to_int,
    float: _to_float,
    str: _to_str,
    Decimal: _to_decimal,
    dt.datetime: _to_datetime,
    dt.date: _to_date,
    bytes: _to_bytes,
}


def coerce_value(value: Any, spec: ColumnSpec) -> Any:
    """Convert a driver value to the field's annotated type."""
    if value is None:
        return None if spec.optional else _zero_value(spec.type)
    if type(value) is spec.type:
        return value
    converter = _CONVERTERS.get(spec.type)
    if converter is None:
        return value
    return converter(value)


def decode_row(target: type[T] | RecordDescriptor, row: Mapping[str, Any]) -> T:
    """
    Build one record from a row keyed by column name.

    Columns not in the descriptor are ignored; descriptor columns missing
    from the row take the field default or the zero value of its type.
    """
    descriptor = target if isinstance(target, RecordDescriptor) else describe(target)
    init_kwargs: dict[str, Any] = {}
    late: dict[str, Any] = {}
    for spec in descriptor.columns:
        if spec.name in row:
            try:
                value = coerce_value(row[spec.name], spec)
            except (TypeError, ValueError, UnicodeDecodeError) as e:
                raise MappingError(
                    f"Cannot convert column {spec.name!r} to "
                    f"{getattr(spec.type, '__name__', spec.type)}: {e}",
                    record_type=descriptor.record_type,
                    cause=e,
                ) from e
        else:
            value = spec.missing_value()
        if spec.init:
            init_kwargs[spec.field_name] = value
        else:
            late[spec.field_name] = value

    record = descriptor.record_type(**init_kwargs)
    for name, value in late.items():
        object.__setattr__(record, name, value)
    return record


def decode_rows(
    target: type[T] | RecordDescriptor,
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
) -> list[T]:
    """Decode every row; raises before returning anything if one row fails."""
    descriptor = target if isinstance(target, RecordDescriptor) else describe(target)
    return [decode_row(descriptor, dict(zip(columns, row, strict=False))) for row in rows]


def encode_record(record: Any) -> tuple[list[str], list[Any]]:
    """
    Columns and values for an INSERT, aligned by position.

    Generated columns are left out while their value is ``None`` so the
    store assigns them.
    """
    if isinstance(record, type):
        raise MappingError(
            f"Expected a record instance, got the type {record.__name__}",
            record_type=record,
        )
    descriptor = describe(type(record))
    columns: list[str] = []
    values: list[Any] = []
    for spec in descriptor.columns:
        value = getattr(record, spec.field_name)
        if spec.generated and value is None:
            continue
        columns.append(spec.name)
        values.append(value)
    if not columns:
        raise MappingError(
            f"{descriptor.record_type.__name__} has no values to insert",
            record_type=descriptor.record_type,
        )
    return columns, values


__all__ = [
    "COLUMN_KEY",
    "ColumnSpec",
    "RecordDescriptor",
    "coerce_value",
    "column",
    "decode_row",
    "decode_rows",
    "describe",
    "encode_record",
]
