"""
Structured error types for shiftline.

Every failure the data-access layer can produce is a typed ``ShiftlineError``
subclass carrying a category, retry metadata, structured context and the
chained driver exception. Callers decide whether to log-and-abort or
log-and-continue; nothing in shiftline retries on its own.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure mode of the data layer
    - **No Silent Retries:** ``retryable`` is advisory metadata only
    - **Rich Context:** Errors carry role, table, operation and pattern
    - **Error Chaining:** The driver's native error is never swallowed

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       ShiftlineError                             │
        │  (category, retryable, context, cause)                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ConfigurationError   MappingError      BuildError              │
        │  (CONFIG)             (VALIDATION)      (VALIDATION)            │
        │                                                                  │
        │  UnsafeQueryError     ExecutionError    DatabaseConnectionError │
        │  (SECURITY)           (DATABASE)        (DATABASE, retryable)   │
        │                                                                  │
        │  ValidationError      GPSError                                  │
        │  (VALIDATION)         (GPS)                                     │
        │                          │                                       │
        │              DriverAlreadyActiveError                            │
        │              DriverNotFoundError                                 │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = BuildError("3 placeholders but 2 parameters")
    >>> error.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>
    >>> error.with_context(role="admin", table="tokens").context.table
    'tokens'

Guardrails:
    ❌ DON'T: Raise bare ``Exception`` from the data layer
    ✅ DO: Use the matching ShiftlineError subclass

    ❌ DON'T: Drop the driver exception
    ✅ DO: Pass it as ``cause=`` so ``__cause__`` is chained

Tags:
    error-handling, exception-hierarchy, error-context, shiftline
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    DATABASE = "DATABASE"         # Statement failures, pool exhaustion
    CONFIG = "CONFIG"             # Unregistered roles, bad settings
    VALIDATION = "VALIDATION"     # Mapping and build defects, bad requests
    SECURITY = "SECURITY"         # Raw SQL rejected by the denylist
    GPS = "GPS"                   # GPS driver lifecycle failures
    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"           # Uncategorized errors


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only non-None fields are serialized by ``to_dict()``. Anything that does
    not fit a typed field goes into ``metadata``.

    Attributes:
        role: Database role the call was issued under
        table: Table reference of the statement
        operation: Data-access operation (insert, select, select_primitive, execute_sql)
        pattern: Denylist pattern that rejected a raw statement
        metadata: Additional key-value pairs
    """

    role: str | None = None
    table: str | None = None
    operation: str | None = None
    pattern: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["role", "table", "operation", "pattern"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ShiftlineError(Exception):
    """
    Base exception for all shiftline errors.

    Subclasses set ``default_category`` and ``default_retryable``; both can
    be overridden per instance.
    """

    default_category: ErrorCategory = ErrorCategory.UNKNOWN
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ShiftlineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ExecutionError("insert failed", cause=e).with_context(
                role="admin", table="tokens"
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# DATA-ACCESS ERRORS
# =============================================================================


class ConfigurationError(ShiftlineError):
    """
    Configuration error, e.g. an unregistered role or unknown backend.

    Fatal: the process (or the specific call path) must abort. Never falls
    back to a default role.
    """

    default_category = ErrorCategory.CONFIG


class MappingError(ShiftlineError):
    """Record type is not mappable (missing tag, bad or duplicate column)."""

    default_category = ErrorCategory.VALIDATION

    def __init__(self, message: str, *, record_type: type | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.record_type = record_type


class BuildError(ShiftlineError):
    """Statement could not be built (placeholder/parameter mismatch, bad inputs)."""

    default_category = ErrorCategory.VALIDATION


class UnsafeQueryError(ShiftlineError):
    """Raw SQL matched the denylist and was not executed."""

    default_category = ErrorCategory.SECURITY

    def __init__(self, message: str, *, pattern: str, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.pattern = pattern
        self.context.pattern = pattern


class ExecutionError(ShiftlineError):
    """The store rejected or failed the statement. Wraps the driver error."""

    default_category = ErrorCategory.DATABASE


class DatabaseConnectionError(ShiftlineError):
    """
    The role's connection could not serve the statement.

    Raised for pool exhaustion, refused or lost connections. Marked
    retryable for callers that want to retry; the data layer itself does not.
    """

    default_category = ErrorCategory.DATABASE
    default_retryable = True


# =============================================================================
# FLEET ERRORS
# =============================================================================


class ValidationError(ShiftlineError):
    """Request payload is missing required fields or is malformed."""

    default_category = ErrorCategory.VALIDATION

    def __init__(self, message: str, *, missing_fields: list[str] | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.missing_fields = missing_fields or []

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.missing_fields:
            result["missing_fields"] = self.missing_fields
        return result


class GPSError(ShiftlineError):
    """GPS driver lifecycle failure."""

    default_category = ErrorCategory.GPS


class DriverAlreadyActiveError(GPSError):
    """A GPS driver object already exists for this driver."""

    def __init__(self, driver_id: str):
        self.driver_id = driver_id
        super().__init__(f"Driver already active: {driver_id}")


class DriverNotFoundError(GPSError):
    """No GPS driver object exists for this driver."""

    def __init__(self, driver_id: str):
        self.driver_id = driver_id
        super().__init__(f"Driver not found: {driver_id}")


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: BaseException) -> bool:
    """Check if an error is flagged retryable."""
    if isinstance(error, ShiftlineError):
        return error.retryable
    return False


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, ShiftlineError):
        return error.category
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ShiftlineError",
    "ConfigurationError",
    "MappingError",
    "BuildError",
    "UnsafeQueryError",
    "ExecutionError",
    "DatabaseConnectionError",
    "ValidationError",
    "GPSError",
    "DriverAlreadyActiveError",
    "DriverNotFoundError",
    "is_retryable",
    "categorize_error",
]
