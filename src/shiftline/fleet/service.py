"""
Driver shift workflow.

Shift start records the vehicle status and starts GPS tracking for the
driver; shift end stops tracking. Each step is one call on a collaborator
(``QueryExecutor.execute_sql`` under the driver role, the ``GPSModule``),
and a failed step stops the workflow with a typed error the HTTP layer
turns into a response.
"""

from __future__ import annotations

from shiftline.core.adapters import StatementResult
from shiftline.core.errors import ExecutionError, GPSError, ShiftlineError, ValidationError
from shiftline.core.logging import get_logger
from shiftline.db.executor import QueryExecutor
from shiftline.db.roles import Role
from shiftline.fleet.gps import DriverPosition, GPSModule
from shiftline.fleet.models import WorkShift

logger = get_logger(__name__)

UPDATE_VEHICLE_STATUS_SQL = "UPDATE car_isusing SET car_isusing = ? WHERE car_id = ?"


def _missing(*checks: tuple[str, object]) -> list[str]:
    return [key for key, value in checks if not value]


class ShiftService:
    """Shift start/end on top of the data-access layer and the GPS registry."""

    def __init__(self, executor: QueryExecutor, gps: GPSModule, role: Role | str = Role.DRIVER):
        self._executor = executor
        self._gps = gps
        self._role = role

    def update_vehicle_status(self, car_id: str, status: str) -> StatementResult:
        """Set the in-use status of one vehicle."""
        return self._executor.execute_sql(self._role, UPDATE_VEHICLE_STATUS_SQL, status, car_id)

    def start_shift(self, shift: WorkShift) -> DriverPosition:
        """
        Begin a shift.

        Raises:
            ValidationError: driver_id, car_id, car_isusing or route_id missing.
            ExecutionError: the vehicle status update failed.
            GPSError: the driver could not be registered for tracking.
        """
        missing = _missing(
            ("driver_id", shift.driver_id),
            ("car_id", shift.vehicle_no),
            ("car_isusing", shift.vehicle_status),
            ("route_id", shift.route_id),
        )
        if missing:
            raise ValidationError("Missing required fields", missing_fields=missing)

        logger.info(
            "shift.start",
            driver_id=shift.driver_id,
            car_id=shift.vehicle_no,
            route_id=shift.route_id,
        )

        try:
            self.update_vehicle_status(shift.vehicle_no, shift.vehicle_status)
        except ShiftlineError as e:
            raise ExecutionError(
                "Vehicle status update failed",
                retryable=e.retryable,
                cause=e,
            ).with_context(operation="update_vehicle_status") from e

        try:
            return self._gps.create_driver(shift.driver_id)
        except GPSError as e:
            raise GPSError("Failed to create driver", cause=e).with_context(
                driver_id=shift.driver_id
            ) from e

    def end_shift(self, shift: WorkShift) -> None:
        """
        End a shift. The vehicle status is left as it is.

        Raises:
            ValidationError: driver_id or car_id missing.
            GPSError: the driver was not being tracked.
        """
        missing = _missing(
            ("driver_id", shift.driver_id),
            ("car_id", shift.vehicle_no),
        )
        if missing:
            raise ValidationError("Missing required fields", missing_fields=missing)

        logger.info("shift.end", driver_id=shift.driver_id, car_id=shift.vehicle_no)

        try:
            self._gps.delete_driver(shift.driver_id)
        except GPSError as e:
            raise GPSError("Failed to delete driver", cause=e).with_context(
                driver_id=shift.driver_id
            ) from e


__all__ = [
    "ShiftService",
    "UPDATE_VEHICLE_STATUS_SQL",
]
