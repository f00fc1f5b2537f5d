"""Database adapter registry and factory.

Manifesto:
    Role configuration names a backend (``sqlite``, ``mysql``); it never
    names an adapter class. The registry maps backend names to adapter
    classes and ``create_adapter()`` turns a ``DatabaseConfig`` into an
    unconnected adapter.

Tags:
    shiftline, database, registry, factory
"""

from __future__ import annotations

from shiftline.core.errors import ConfigurationError

from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .sqlite import SQLiteAdapter
from .types import DatabaseConfig, DatabaseType


class AdapterRegistry:
    """
    Registry for database adapter classes.

    Pre-registered adapters:
    - ``sqlite`` -- :class:`SQLiteAdapter`
    - ``mysql`` / ``mariadb`` -- :class:`MySQLAdapter`
    """

    def __init__(self):
        self._factories: dict[str, type[DatabaseAdapter]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self._factories["sqlite"] = SQLiteAdapter
        self._factories["mysql"] = MySQLAdapter
        self._factories["mariadb"] = MySQLAdapter  # Alias

    def register(self, name: str, adapter_class: type[DatabaseAdapter]) -> None:
        """Register an adapter class under a backend name."""
        self._factories[name.lower()] = adapter_class

    def create(self, name: str, config: DatabaseConfig) -> DatabaseAdapter:
        """Create an adapter by backend name."""
        name = name.lower()
        if name not in self._factories:
            raise ConfigurationError(f"Unknown database adapter: {name}")
        return self._factories[name].from_config(config)

    def list_adapters(self) -> list[str]:
        """List registered backend names."""
        return sorted(self._factories.keys())


# Global registry
adapter_registry = AdapterRegistry()


def create_adapter(config: DatabaseConfig) -> DatabaseAdapter:
    """
    Create an (unconnected) adapter for a config.

    Usage:
        adapter = create_adapter(DatabaseConfig(db_type=DatabaseType.SQLITE, path="shiftline.db"))
    """
    name = config.db_type.value if isinstance(config.db_type, DatabaseType) else str(config.db_type)
    return adapter_registry.create(name, config)


__all__ = [
    "AdapterRegistry",
    "adapter_registry",
    "create_adapter",
]
