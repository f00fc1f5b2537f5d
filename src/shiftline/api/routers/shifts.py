"""
Shift router -- driver shift start and end.

POST /shift/start
POST /shift/end
OPTIONS /shift/start, /shift/end
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from shiftline.api.deps import Shifts
from shiftline.fleet.models import ErrorResponse, MessageResponse, WorkShift

router = APIRouter(prefix="/shift")

SHIFT_START_MESSAGE = "Shift start processed"
SHIFT_END_MESSAGE = "Shift end processed"

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Malformed body or missing fields"},
    500: {"model": ErrorResponse, "description": "Vehicle status or GPS failure"},
}


@router.post("/start", response_model=MessageResponse, responses=_ERROR_RESPONSES)
def start_shift(shift: WorkShift, service: Shifts) -> MessageResponse:
    """Record the vehicle status and start GPS tracking for the driver."""
    service.start_shift(shift)
    return MessageResponse(message=SHIFT_START_MESSAGE)


@router.post("/end", response_model=MessageResponse, responses=_ERROR_RESPONSES)
def end_shift(shift: WorkShift, service: Shifts) -> MessageResponse:
    """Stop GPS tracking for the driver."""
    service.end_shift(shift)
    return MessageResponse(message=SHIFT_END_MESSAGE)


@router.options("/start", include_in_schema=False)
@router.options("/end", include_in_schema=False)
def shift_options() -> Response:
    """Bare OPTIONS without CORS preflight headers."""
    return Response(status_code=200, headers={"Allow": "POST, OPTIONS"})
