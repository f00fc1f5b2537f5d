"""Driver shift feature: payload models, GPS driver registry, shift service."""

from .gps import DriverPosition, GPSModule, InMemoryGPSModule
from .models import RouteRecord, WorkShift
from .service import ShiftService

__all__ = [
    "DriverPosition",
    "GPSModule",
    "InMemoryGPSModule",
    "RouteRecord",
    "ShiftService",
    "WorkShift",
]
