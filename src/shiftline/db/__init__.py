"""Role-scoped SQL data-access layer.

Architecture::

    roles.py      Role, RoleRegistry            role -> pooled adapter
    mapper.py     column, describe, decode_row  dataclass <-> row
    builder.py    QuerySpec, build_select       parameterized SQL synthesis
    sqlfilter.py  UnsafeSQLFilter               raw-path denylist heuristic
    executor.py   QueryExecutor                 insert/select/select_primitive/execute_sql

Tags:
    shiftline, database, data-access
"""

from .builder import BuiltStatement, QuerySpec, build_insert, build_select, count_placeholders
from .executor import QueryExecutor
from .mapper import RecordDescriptor, column, decode_row, describe, encode_record
from .roles import Role, RoleRegistry
from .sqlfilter import DEFAULT_ALLOWED_LEADING, DEFAULT_DENYLIST, UnsafeSQLFilter

__all__ = [
    "BuiltStatement",
    "DEFAULT_ALLOWED_LEADING",
    "DEFAULT_DENYLIST",
    "QueryExecutor",
    "QuerySpec",
    "RecordDescriptor",
    "Role",
    "RoleRegistry",
    "UnsafeSQLFilter",
    "build_insert",
    "build_select",
    "column",
    "count_placeholders",
    "decode_row",
    "describe",
    "encode_record",
]
