"""shiftline core -- primitives the data-access layer is built on.

Architecture::

    errors.py      Structured error hierarchy (ShiftlineError and subclasses)
    logging.py     structlog configuration and get_logger()
    timing.py      Timed log events for database round-trips
    protocols.py   Connection / Cursor protocols (DB-API 2.0 subset)
    adapters/      Per-role connection pools (SQLite, MySQL)

Tags:
    shiftline, core, primitives
"""

from .errors import (
    BuildError,
    ConfigurationError,
    DatabaseConnectionError,
    ErrorCategory,
    ErrorContext,
    ExecutionError,
    MappingError,
    ShiftlineError,
    UnsafeQueryError,
    ValidationError,
)
from .logging import configure_logging, get_logger

__all__ = [
    "BuildError",
    "ConfigurationError",
    "DatabaseConnectionError",
    "ErrorCategory",
    "ErrorContext",
    "ExecutionError",
    "MappingError",
    "ShiftlineError",
    "UnsafeQueryError",
    "ValidationError",
    "configure_logging",
    "get_logger",
]
