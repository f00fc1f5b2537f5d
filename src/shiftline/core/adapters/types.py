"""Database types and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from shiftline.core.errors import ConfigurationError


class DatabaseType(str, Enum):
    """Supported database types."""

    SQLITE = "sqlite"
    MYSQL = "mysql"


@dataclass
class DatabaseConfig:
    """
    Configuration for one role's database connection.

    Different fields are used by different database types.
    """

    # Common
    db_type: DatabaseType = DatabaseType.SQLITE

    # SQLite
    path: str | None = None

    # MySQL
    host: str = "localhost"
    port: int = 3306
    database: str = ""
    username: str | None = None
    password: str | None = None

    # Connection pool
    pool_size: int = 5

    # Options
    connect_timeout: int = 10

    # Extra options (driver-specific)
    options: dict[str, Any] = field(default_factory=dict)

    def to_display_string(self) -> str:
        """Connection target for logs and CLI output, password masked."""
        match self.db_type:
            case DatabaseType.SQLITE:
                return f"sqlite:///{self.path or ':memory:'}"
            case DatabaseType.MYSQL:
                user = self.username or ""
                secret = ":***" if self.password else ""
                return f"mysql://{user}{secret}@{self.host}:{self.port}/{self.database}"
            case _:
                raise ConfigurationError(f"Unsupported database type: {self.db_type}")


__all__ = [
    "DatabaseType",
    "DatabaseConfig",
]
