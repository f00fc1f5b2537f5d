"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers and the
data-access collaborators into a single ``FastAPI`` instance.

Manifesto:
    The app factory is the single composition root: the role registry,
    the query executor, the GPS registry and the shift service are built
    here, once, and shared by every request through ``app.state``. Tests
    pass their own registry or GPS module instead of patching globals.

Tags:
    shiftline, api, app-factory, composition-root, FastAPI

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shiftline.api.deps import get_settings
from shiftline.api.errors import install_error_handlers
from shiftline.core.logging import configure_logging, get_logger
from shiftline.db.executor import QueryExecutor
from shiftline.db.roles import Role, RoleRegistry
from shiftline.db.sqlfilter import UnsafeSQLFilter
from shiftline.fleet.gps import GPSModule, InMemoryGPSModule
from shiftline.fleet.service import ShiftService
from shiftline.settings import ShiftlineSettings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan -- startup / shutdown hooks."""
    settings: ShiftlineSettings = app.state.settings
    configure_logging(level=settings.log_level, json_format=settings.log_format == "json")
    log = get_logger("shiftline.api")
    registry: RoleRegistry = app.state.registry
    log.info("api.starting", version=app.version, roles=registry.roles())
    yield
    registry.close()
    log.info("api.stopped")


def create_app(
    *,
    settings: ShiftlineSettings | None = None,
    registry: RoleRegistry | None = None,
    gps: GPSModule | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : ShiftlineSettings | None
        Override settings (useful for testing). When ``None`` the cached
        singleton from :func:`get_settings` is used.
    registry : RoleRegistry | None
        Prebuilt role registry. Defaults to one built from ``settings``.
    gps : GPSModule | None
        GPS driver registry. Defaults to a fresh ``InMemoryGPSModule``.
    """
    settings = settings or get_settings()
    registry = registry or RoleRegistry.from_settings(settings)
    registry.require(Role.DRIVER)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    executor = QueryExecutor(registry, UnsafeSQLFilter.from_settings(settings))
    app.state.settings = settings
    app.state.registry = registry
    app.state.gps = gps if gps is not None else InMemoryGPSModule()
    app.state.shift_service = ShiftService(executor, app.state.gps, role=Role.DRIVER)

    # Override DI so endpoints use the provided settings
    app.dependency_overrides[get_settings] = lambda: settings

    # ── Middleware ───────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # ── Exception handlers ───────────────────────────────────────────
    install_error_handlers(app)

    # ── Routers ──────────────────────────────────────────────────────
    from shiftline.api.routers import health, shifts

    # Health at root level (no prefix) for container healthchecks
    app.include_router(health.router, tags=["health"])
    app.include_router(shifts.router, prefix=settings.api_prefix, tags=["shifts"])

    return app
