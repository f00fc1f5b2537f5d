"""Role registry: logical database role -> pooled adapter.

Manifesto:
    Every data-access call names the role it runs as (``admin``,
    ``driver``). The role decides which credentials and which pool the
    statement uses. The mapping is built once at startup and is read-only
    afterwards, so it is shared freely between request threads without
    locking.

    Looking up a role that was never registered is a configuration defect,
    not a per-call condition: it raises ``ConfigurationError`` and never
    falls back to another role.

Examples:
    >>> from shiftline.core.adapters import SQLiteAdapter
    >>> registry = RoleRegistry({Role.ADMIN: SQLiteAdapter(":memory:")})
    >>> registry.resolve("admin").db_type.value
    'sqlite'

Tags:
    shiftline, roles, registry, configuration
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

from shiftline.core.adapters import DatabaseAdapter, DatabaseType, create_adapter
from shiftline.core.errors import ConfigurationError
from shiftline.core.logging import get_logger

if TYPE_CHECKING:
    from shiftline.settings import ShiftlineSettings

logger = get_logger(__name__)


class Role(str, Enum):
    """Database roles used by shiftline feature code."""

    ADMIN = "admin"
    DRIVER = "driver"


def _role_key(role: Role | str) -> str:
    return role.value if isinstance(role, Role) else str(role)


class RoleRegistry:
    """Immutable role -> adapter mapping, constructed once at startup."""

    def __init__(self, adapters: Mapping[Role | str, DatabaseAdapter]):
        self._adapters: Mapping[str, DatabaseAdapter] = MappingProxyType(
            {_role_key(role): adapter for role, adapter in adapters.items()}
        )

    @classmethod
    def from_settings(cls, settings: ShiftlineSettings) -> RoleRegistry:
        """Build one adapter per configured role.

        Roles on the same SQLite file share one adapter (and so one
        connection); every other role gets its own pool.
        """
        adapters: dict[str, DatabaseAdapter] = {}
        by_target: dict[str, DatabaseAdapter] = {}
        for name, role_settings in settings.roles.items():
            config = role_settings.to_database_config()
            target = config.to_display_string()
            if config.db_type is DatabaseType.SQLITE and target in by_target:
                adapters[name] = by_target[target]
                continue
            adapter = create_adapter(config)
            by_target.setdefault(target, adapter)
            adapters[name] = adapter
            logger.debug("db.role_registered", role=name, target=target)
        return cls(adapters)

    def resolve(self, role: Role | str) -> DatabaseAdapter:
        """Return the adapter for ``role``; unknown roles are fatal."""
        key = _role_key(role)
        try:
            return self._adapters[key]
        except KeyError:
            raise ConfigurationError(
                f"Database role not registered: {key!r}"
            ).with_context(role=key) from None

    def require(self, *roles: Role | str) -> None:
        """Fail fast at startup when a role the process needs is missing."""
        missing = [_role_key(r) for r in roles if _role_key(r) not in self._adapters]
        if missing:
            raise ConfigurationError(
                f"Required database roles not configured: {', '.join(missing)}"
            )

    def __contains__(self, role: object) -> bool:
        if not isinstance(role, (Role, str)):
            return False
        return _role_key(role) in self._adapters

    def roles(self) -> list[str]:
        """Registered role names, sorted."""
        return sorted(self._adapters)

    def items(self) -> Iterable[tuple[str, DatabaseAdapter]]:
        return self._adapters.items()

    def _unique_adapters(self) -> list[DatabaseAdapter]:
        seen: dict[int, DatabaseAdapter] = {}
        for adapter in self._adapters.values():
            seen.setdefault(id(adapter), adapter)
        return list(seen.values())

    def connect_all(self) -> None:
        """Open every role's pool (call at startup to surface bad credentials early)."""
        for adapter in self._unique_adapters():
            adapter.connect()

    def close(self) -> None:
        """Close every role's pool."""
        for adapter in self._unique_adapters():
            adapter.disconnect()


__all__ = [
    "Role",
    "RoleRegistry",
]
