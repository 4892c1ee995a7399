"""Database adapter registry and factory.

Manifesto:
    Consumers never hard-code adapter class names. The registry maps the
    configured driver string to an adapter class; the connection manager
    looks the driver up once, at configure time.

Features:
    - ``AdapterRegistry`` singleton with ``mysql`` and ``pgsql`` registered
    - ``register()`` for custom adapters or test doubles
    - ``lookup()`` returns None for unsupported drivers; ``create()`` raises

Tags:
    database, registry, factory, drupal-access

Doc-Types:
    api-reference
"""

from __future__ import annotations

from drupal_access.errors import ConnectionUnavailableError

from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .postgresql import PostgreSQLAdapter
from .types import DatabaseConfig, DatabaseType


class AdapterRegistry:
    """
    Registry for database adapter classes.

    Pre-registered adapters:
    - ``mysql``: :class:`MySQLAdapter`
    - ``pgsql``: :class:`PostgreSQLAdapter`
    """

    def __init__(self):
        self._factories: dict[str, type[DatabaseAdapter]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self._factories[DatabaseType.MYSQL.value] = MySQLAdapter
        self._factories[DatabaseType.PGSQL.value] = PostgreSQLAdapter

    def register(self, name: str, adapter_class: type[DatabaseAdapter]) -> None:
        """Register an adapter class."""
        self._factories[name.lower()] = adapter_class

    def unregister(self, name: str) -> None:
        self._factories.pop(name.lower(), None)

    def lookup(self, name: str) -> type[DatabaseAdapter] | None:
        return self._factories.get((name or "").lower())

    def create(self, config: DatabaseConfig) -> DatabaseAdapter:
        """Create an adapter for ``config.driver``."""
        adapter_class = self.lookup(config.driver)
        if adapter_class is None:
            raise ConnectionUnavailableError(
                f"Unsupported database driver: {config.driver!r}"
            ).with_context(backend=config.driver)
        return adapter_class(config)

    def list_adapters(self) -> list[str]:
        """List registered adapter names."""
        return sorted(self._factories.keys())


# Global registry
adapter_registry = AdapterRegistry()


__all__ = [
    "AdapterRegistry",
    "adapter_registry",
]
