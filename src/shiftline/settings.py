"""Process configuration for shiftline.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.
    Roles and their credentials are read once at startup; an application
    never discovers a new role mid-flight.

    - **Pydantic validation:** Type-checked at startup, not per call
    - **Environment-driven:** ``SHIFTLINE_`` env vars and a ``.env`` file
    - **Nested roles:** ``SHIFTLINE_ROLES__ADMIN__BACKEND=mysql`` etc.
    - **Sensible defaults:** Both roles on a local SQLite file for development

Examples:
    >>> settings = ShiftlineSettings(
    ...     roles={"admin": RoleSettings(backend="sqlite", path=":memory:")}
    ... )
    >>> settings.roles["admin"].to_database_config().db_type.value
    'sqlite'

Tags:
    settings, configuration, pydantic, environment, shiftline
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shiftline.core.adapters.types import DatabaseConfig, DatabaseType
from shiftline.db.sqlfilter import DEFAULT_ALLOWED_LEADING, DEFAULT_DENYLIST


class RoleSettings(BaseModel):
    """Connection settings for one database role."""

    backend: DatabaseType = DatabaseType.SQLITE
    path: str | None = None
    host: str = "localhost"
    port: int = 3306
    database: str = ""
    username: str | None = None
    password: str | None = None
    pool_size: int = Field(default=5, ge=1)
    connect_timeout: int = Field(default=10, ge=1)

    def to_database_config(self) -> DatabaseConfig:
        return DatabaseConfig(
            db_type=self.backend,
            path=self.path,
            host=self.host,
            port=self.port,
            database=self.database,
            username=self.username,
            password=self.password,
            pool_size=self.pool_size,
            connect_timeout=self.connect_timeout,
        )


def _default_roles() -> dict[str, RoleSettings]:
    return {
        "admin": RoleSettings(backend=DatabaseType.SQLITE, path="shiftline.db"),
        "driver": RoleSettings(backend=DatabaseType.SQLITE, path="shiftline.db"),
    }


class ShiftlineSettings(BaseSettings):
    """Settings for the shiftline service.

    Order of precedence (highest → lowest):
        1. Environment variables (``SHIFTLINE_LOG_LEVEL``, ``SHIFTLINE_ROLES__ADMIN__HOST``, ...)
        2. ``.env`` file
        3. Defaults below
    """

    model_config = SettingsConfigDict(
        env_prefix="SHIFTLINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # ── Database roles ───────────────────────────────────────────────────
    roles: dict[str, RoleSettings] = Field(default_factory=_default_roles)

    # ── Raw SQL filter ───────────────────────────────────────────────────
    sql_denylist: list[str] = Field(default_factory=lambda: list(DEFAULT_DENYLIST))
    sql_allowed_leading: list[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_LEADING))

    # ── Observability ────────────────────────────────────────────────────
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = Field(default="console", pattern="^(console|json)$")

    # ── HTTP ─────────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = ""
    api_title: str = "shiftline API"
    api_version: str = "0.1.0"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


__all__ = [
    "RoleSettings",
    "ShiftlineSettings",
]
