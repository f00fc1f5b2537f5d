"""
FastAPI dependency injection -- shared singletons built at app creation.

Usage in routers::

    from shiftline.api.deps import Shifts

    @router.post("/shift/start")
    def start(shift: WorkShift, service: Shifts):
        ...
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from shiftline.db.roles import RoleRegistry
from shiftline.fleet.service import ShiftService
from shiftline.settings import ShiftlineSettings

# ── Settings (singleton) ─────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_settings() -> ShiftlineSettings:
    """Cached settings -- loaded once per process."""
    return ShiftlineSettings()


# ── App-scoped collaborators ─────────────────────────────────────────────


def get_registry(request: Request) -> RoleRegistry:
    return request.app.state.registry


def get_shift_service(request: Request) -> ShiftService:
    return request.app.state.shift_service


# ── Annotated shortcuts ──────────────────────────────────────────────────

Settings = Annotated[ShiftlineSettings, Depends(get_settings)]
Registry = Annotated[RoleRegistry, Depends(get_registry)]
Shifts = Annotated[ShiftService, Depends(get_shift_service)]
