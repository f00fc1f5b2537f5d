"""
Timing utilities for database round-trips.

Design:
- Start logs at DEBUG, end logs at the requested level with duration_ms
- Failures log an ``.error`` event with the error type, then re-raise
- Timer overhead is a pair of ``time.perf_counter()`` calls

Usage:
    with log_db_operation("select", "tokens", role="admin") as timer:
        result = adapter.run_query(sql, params)
        timer.add_metric("rows", len(result.rows))
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from shiftline.core.logging import get_logger


def _generate_span_id() -> str:
    """Generate a short span ID (8 hex chars)."""
    return uuid.uuid4().hex[:8]


@dataclass
class TimingResult:
    """Result of a timed operation."""

    step: str
    span_id: str = field(default_factory=_generate_span_id)
    started_at: float = field(default_factory=time.perf_counter)
    ended_at: float | None = None
    metrics: dict[str, Any] = field(default_factory=dict)

    def stop(self) -> TimingResult:
        """Record end time."""
        self.ended_at = time.perf_counter()
        return self

    @property
    def duration_ms(self) -> float:
        """Duration in milliseconds."""
        end = self.ended_at if self.ended_at is not None else time.perf_counter()
        return (end - self.started_at) * 1000

    def add_metric(self, key: str, value: Any) -> TimingResult:
        """Add a metric to include in the log output."""
        self.metrics[key] = value
        return self

    def to_log_dict(self) -> dict[str, Any]:
        """Convert to dict for logging."""
        result: dict[str, Any] = {
            "duration_ms": round(self.duration_ms, 2),
            "span_id": self.span_id,
        }
        result.update(self.metrics)
        return result


@contextmanager
def log_step(event: str, level: str = "info", **extra_metrics: Any) -> Iterator[TimingResult]:
    """
    Context manager that logs step start/end with timing.

    Logs:
    - Start: DEBUG level (``event.start``)
    - End: ``level`` (``event.end``) with duration_ms
    - Error: ERROR level (``event.error``) with error_type, then re-raises
    """
    log = get_logger("shiftline.timing")
    timer = TimingResult(step=event, metrics=dict(extra_metrics))
    log.debug(f"{event}.start", span_id=timer.span_id, **extra_metrics)

    try:
        yield timer
    except Exception as e:
        timer.stop()
        log.error(
            f"{event}.error",
            error_type=type(e).__name__,
            error_message=str(e),
            **timer.to_log_dict(),
        )
        raise

    timer.stop()
    getattr(log, level)(f"{event}.end", **timer.to_log_dict())


@contextmanager
def log_db_operation(operation: str, table: str, **extra: Any) -> Iterator[TimingResult]:
    """
    Log a database operation with table context.

    Logs at DEBUG level to avoid noise.

    Usage:
        with log_db_operation("insert", "tokens", role="admin"):
            adapter.run_statement(sql, params)
    """
    with log_step(f"db.{operation}", level="debug", table=table, **extra) as timer:
        yield timer


__all__ = [
    "TimingResult",
    "log_step",
    "log_db_operation",
]
