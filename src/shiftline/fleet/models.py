"""
Driver shift payloads.

JSON keys follow the mobile client (``car_id``, ``car_isusing``,
``work_stime`` ...); attribute names say what the values are. Missing keys
take empty defaults so presence is checked by the service, which reports
every missing field at once.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RouteRecord(BaseModel):
    """One GPS sample on a driven route."""

    time: str = Field(default="", description="Sample timestamp")
    gps_x: int = Field(default=0, description="GPS X coordinate")
    gps_y: int = Field(default=0, description="GPS Y coordinate")


class WorkShift(BaseModel):
    """Shift start/end request body."""

    model_config = ConfigDict(populate_by_name=True)

    driver_id: str = Field(default="", description="Driver identifier")
    vehicle_no: str = Field(default="", alias="car_id", description="Vehicle plate number")
    vehicle_status: str = Field(default="", alias="car_isusing", description="Vehicle status to record")
    route_id: int = Field(default=0, description="Route number; 0 means unset")
    shift_start: str = Field(default="", alias="work_stime", description="Shift start time")
    shift_end: str = Field(default="", alias="work_etime", description="Shift end time")
    feedback: str = Field(default="", alias="remark", description="Driver feedback")
    route_record: list[RouteRecord] = Field(
        default_factory=list,
        alias="record_route",
        description="Route samples with time and GPS coordinates",
    )


class MessageResponse(BaseModel):
    """Success body."""

    message: str


class ErrorResponse(BaseModel):
    """Failure body."""

    error: str


__all__ = [
    "ErrorResponse",
    "MessageResponse",
    "RouteRecord",
    "WorkShift",
]
