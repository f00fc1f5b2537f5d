"""
GPS driver registry.

The shift service only needs three things from the GPS subsystem: start
tracking a driver, stop tracking a driver, look a driver up. ``GPSModule``
is that contract; ``InMemoryGPSModule`` is the process-local
implementation the API runs with.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from shiftline.core.errors import DriverAlreadyActiveError, DriverNotFoundError
from shiftline.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class DriverPosition:
    """Last known position of a tracked driver. New drivers start at (0, 0)."""

    driver_id: str
    latitude: float = 0.0
    longitude: float = 0.0


@runtime_checkable
class GPSModule(Protocol):
    """Driver tracking contract used by the shift service."""

    def create_driver(self, driver_id: str) -> DriverPosition: ...

    def delete_driver(self, driver_id: str) -> None: ...

    def get_driver(self, driver_id: str) -> DriverPosition | None: ...


class InMemoryGPSModule:
    """Thread-safe in-process driver registry."""

    def __init__(self) -> None:
        self._drivers: dict[str, DriverPosition] = {}
        self._lock = threading.Lock()

    def create_driver(self, driver_id: str) -> DriverPosition:
        """Start tracking ``driver_id``; raises if already tracked."""
        with self._lock:
            if driver_id in self._drivers:
                raise DriverAlreadyActiveError(driver_id)
            position = DriverPosition(driver_id=driver_id)
            self._drivers[driver_id] = position
        logger.info("gps.driver_created", driver_id=driver_id)
        return position

    def delete_driver(self, driver_id: str) -> None:
        """Stop tracking ``driver_id``; raises if not tracked."""
        with self._lock:
            if self._drivers.pop(driver_id, None) is None:
                raise DriverNotFoundError(driver_id)
        logger.info("gps.driver_deleted", driver_id=driver_id)

    def get_driver(self, driver_id: str) -> DriverPosition | None:
        with self._lock:
            return self._drivers.get(driver_id)

    def update_position(self, driver_id: str, latitude: float, longitude: float) -> DriverPosition:
        """Record a new position for a tracked driver."""
        with self._lock:
            position = self._drivers.get(driver_id)
            if position is None:
                raise DriverNotFoundError(driver_id)
            position.latitude = latitude
            position.longitude = longitude
            return position

    def active_drivers(self) -> list[str]:
        with self._lock:
            return sorted(self._drivers)

    def __len__(self) -> int:
        with self._lock:
            return len(self._drivers)


__all__ = [
    "DriverPosition",
    "GPSModule",
    "InMemoryGPSModule",
]
