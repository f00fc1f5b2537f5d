"""
Health router -- per-role database connectivity.

GET /health
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from shiftline.api.deps import Registry, Settings
from shiftline.core.errors import ShiftlineError
from shiftline.core.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health")
def health(registry: Registry, settings: Settings) -> JSONResponse:
    """Ping every role; 503 when any role cannot serve ``SELECT 1``."""
    roles: dict[str, str] = {}
    for name, adapter in registry.items():
        try:
            roles[name] = "ok" if adapter.ping() else "error"
        except ShiftlineError as e:
            logger.warning("health.role_unavailable", role=name, error_type=type(e).__name__)
            roles[name] = f"error: {e.message}"

    healthy = all(status == "ok" for status in roles.values())
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "ok" if healthy else "degraded",
            "version": settings.api_version,
            "roles": roles,
        },
    )
