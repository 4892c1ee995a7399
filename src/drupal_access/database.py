"""
Connection manager - owns the configured backend handle.

Emulates Drupal's ``db_connect()`` / active-connection bookkeeping, but as
an explicitly constructed object instead of module globals: build one
``ConnectionManager`` per process, configure it once, and inject it into
the :class:`~drupal_access.query.QueryAdapter`.

Manifesto:
    Database connections are expensive (TCP handshake, auth, TLS).
    A single pool per manager is shared by every in-flight operation.

    - **Configure once:** the last configuration is reused until replaced
    - **Lazy:** the handle is created on first ``get_handle()`` if needed
    - **Eager where pooled:** MySQL opens its pool at configure time
    - **Explicit refusal:** an unsupported driver yields no handle

Architecture:
    ::

        configure({"driver": "mysql", ...})
              │
              ▼
        AdapterRegistry.lookup(driver) ──► None ──► handle stays None
              │
              ▼
        MySQLAdapter / PostgreSQLAdapter
              │ eager_connect? ──► await adapter.connect()
              ▼
        get_handle() ──► adapter (connecting lazily on first call)

Examples:
    >>> manager = ConnectionManager()
    >>> await manager.configure({"driver": "pgsql", "host": "db", "database": "drupal"})
    >>> handle = await manager.get_handle()
    >>> await manager.close()

Guardrails:
    - ALWAYS call ``configure()`` (or build via ``from_settings()``) first
    - NEVER hold pooled connections yourself; go through the QueryAdapter
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

from drupal_access.adapters.base import DatabaseAdapter
from drupal_access.adapters.registry import AdapterRegistry, adapter_registry
from drupal_access.adapters.types import DatabaseConfig
from drupal_access.errors import ConfigurationMissingError, ConnectionUnavailableError
from drupal_access.logging import get_logger
from drupal_access.settings import DrupalAccessSettings, get_settings

logger = get_logger(__name__)


class ConnectionManager:
    """Holds one configuration and the backend handle built from it."""

    def __init__(self, registry: AdapterRegistry | None = None):
        self._registry = registry or adapter_registry
        self._config: DatabaseConfig | None = None
        self._adapter: DatabaseAdapter | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: DrupalAccessSettings | None = None) -> ConnectionManager:
        """Build a manager whose configuration comes from settings.

        Logging is configured from the same settings. No connection is
        opened; the handle is created on first use.
        """
        settings = settings or get_settings()
        settings.apply_logging()
        manager = cls()
        manager._set_config(settings.to_database_config())
        return manager

    @property
    def config(self) -> DatabaseConfig | None:
        return self._config

    @property
    def is_configured(self) -> bool:
        return self._config is not None

    def _set_config(self, config: DatabaseConfig) -> None:
        self._config = config
        adapter_class = self._registry.lookup(config.driver)
        if adapter_class is None:
            logger.error("unsupported_database_driver", driver=config.driver)
            self._adapter = None
        else:
            self._adapter = adapter_class(config)

    async def configure(self, options: DatabaseConfig | Mapping[str, Any]) -> DatabaseAdapter | None:
        """Record the configuration and, for pooled backends, open the pool.

        Re-invoking replaces the stored configuration and handle; the
        previous pool is closed first. Returns the new handle (None for an
        unsupported driver).
        """
        config = options if isinstance(options, DatabaseConfig) else DatabaseConfig.from_options(options)

        async with self._lock:
            previous = self._adapter
            self._set_config(config)
            if previous is not None:
                await previous.disconnect()

            logger.info("database_configured", **config.describe())

            if self._adapter is not None and self._adapter.eager_connect:
                await self._adapter.connect()
            return self._adapter

    async def get_handle(self) -> DatabaseAdapter | None:
        """Return the connected handle, connecting lazily if needed.

        Raises:
            ConfigurationMissingError: ``configure()`` was never called.
            ConnectionUnavailableError: the pool could not be created.
        """
        if self._config is None:
            raise ConfigurationMissingError()

        adapter = self._adapter
        if adapter is None or adapter.is_connected:
            return adapter

        async with self._lock:
            # configure() may have swapped the adapter while we waited.
            adapter = self._adapter
            if adapter is not None and not adapter.is_connected:
                await adapter.connect()
        return adapter

    async def health_check(self) -> dict[str, Any]:
        """Pool statistics plus a ``healthy`` flag."""
        if self._config is None:
            return {"healthy": False, "error": "not configured"}
        if self._adapter is None:
            return {"healthy": False, "error": f"unsupported driver: {self._config.driver}"}
        try:
            adapter = await self.get_handle()
        except ConnectionUnavailableError as e:
            return {"healthy": False, "error": str(e)}
        return await adapter.health_check()

    async def close(self) -> None:
        """Close the pool. The configuration is kept for a later reconnect."""
        async with self._lock:
            if self._adapter is not None:
                await self._adapter.disconnect()


__all__ = [
    "ConnectionManager",
]
