"""Database types and configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from drupal_access.errors import InvalidConfigError


class DatabaseType(str, Enum):
    """Supported database backends."""

    MYSQL = "mysql"
    PGSQL = "pgsql"


DEFAULT_PORTS: dict[str, int] = {
    DatabaseType.MYSQL.value: 3306,
    DatabaseType.PGSQL.value: 5432,
}


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Connection configuration for one backend.

    ``driver`` is kept as the raw string the caller supplied so that an
    unsupported value reaches the connection manager, which refuses to
    produce a handle for it.
    """

    driver: str = DatabaseType.MYSQL.value
    host: str = "localhost"
    port: int = 3306
    user: str | None = None
    password: str | None = None
    database: str = ""

    # Connection pool
    pool_min_size: int = 1
    pool_size: int = 10

    # Timeouts (seconds)
    connect_timeout: float = 10.0
    query_timeout: float | None = None

    @property
    def db_type(self) -> DatabaseType | None:
        """The matching DatabaseType, or None if the driver is unsupported."""
        try:
            return DatabaseType(self.driver)
        except ValueError:
            return None

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> DatabaseConfig:
        """Build a config from a Drupal-style options mapping.

        Example options::

            {
                "driver": "mysql",
                "host": "localhost",
                "port": 3306,
                "user": "drupal",
                "password": "drupal",
                "database": "drupal",
            }

        ``driver`` defaults to ``mysql``; ``port`` defaults per driver.

        Raises:
            InvalidConfigError: ``port`` is not an integer.
        """
        driver = str(options.get("driver") or DatabaseType.MYSQL.value).strip().lower()
        port = options.get("port")
        if port is not None:
            try:
                port = int(port)
            except (TypeError, ValueError) as e:
                raise InvalidConfigError("port", port) from e
        kwargs: dict[str, Any] = {
            "driver": driver,
            "host": options.get("host", "localhost"),
            "port": port if port is not None else DEFAULT_PORTS.get(driver, 0),
            "user": options.get("user"),
            "password": options.get("password"),
            "database": options.get("database", ""),
        }
        for key in ("pool_min_size", "pool_size", "connect_timeout", "query_timeout"):
            if key in options:
                kwargs[key] = options[key]
        return cls(**kwargs)

    def describe(self) -> dict[str, Any]:
        """Loggable view of the config (no password)."""
        return {
            "driver": self.driver,
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "user": self.user,
        }


__all__ = [
    "DatabaseType",
    "DatabaseConfig",
    "DEFAULT_PORTS",
]
