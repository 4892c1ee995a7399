"""Database adapter base class.

Manifesto:
    Both backends share the same lifecycle (connect/disconnect), the same
    pooled acquire/release cycle, and the same diagnostics. The abstract
    base class owns all of that so a concrete adapter only has to say how
    to build its pool, how to run one statement on a pooled connection,
    and how to read its pool counters.

Features:
    - Async ``connect()`` / ``disconnect()`` around a driver pool
    - ``acquire()`` context manager that logs acquire / wait / release and
      refuses to run on a closed pool
    - ``fetch()`` runs native SQL and returns the driver's raw result
    - ``health_check()`` with pool statistics

Tags:
    database, abstract-base, adapter-pattern, pool, drupal-access

Doc-Types:
    api-reference
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any, ClassVar

from drupal_access.dialect import Dialect, get_dialect
from drupal_access.errors import ConnectionUnavailableError, DrupalAccessError
from drupal_access.logging import get_logger

from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)


class DatabaseAdapter(ABC):
    """
    Abstract base class for pooled async database adapters.

    Subclasses set ``db_type`` and, for backends whose pool should be opened
    as soon as the manager is configured, ``eager_connect = True``.
    """

    db_type: ClassVar[DatabaseType]
    eager_connect: ClassVar[bool] = False

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._pool: Any = None
        self._dialect: Dialect = get_dialect(self.db_type.value)

    @property
    def dialect(self) -> Dialect:
        """SQL dialect for this adapter's backend."""
        return self._dialect

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def is_connected(self) -> bool:
        """Whether the pool has been created."""
        return self._pool is not None

    # -- Driver hooks -------------------------------------------------------

    @abstractmethod
    async def _create_pool(self) -> Any:
        """Create and return the driver pool."""
        ...

    @abstractmethod
    async def _close_pool(self, pool: Any) -> None:
        ...

    @abstractmethod
    def _pool_stats(self, pool: Any) -> dict[str, int]:
        """Return ``size``, ``free_size``, ``min_size`` and ``max_size``."""
        ...

    @abstractmethod
    async def _run(self, conn: Any, sql: str, params: Sequence[Any]) -> Any:
        """Execute native ``sql`` on a pooled connection."""
        ...

    # -- Lifecycle ----------------------------------------------------------

    async def connect(self) -> None:
        """Create the pool if it does not exist yet."""
        if self._pool is not None:
            return
        try:
            self._pool = await self._create_pool()
        except DrupalAccessError:
            raise
        except Exception as e:
            raise ConnectionUnavailableError(
                f"Failed to connect to {self.db_type.value}: {e}",
                cause=e,
            ).with_context(backend=self.db_type.value) from e

        if self._pool is None:
            raise ConnectionUnavailableError(
                f"Driver returned no pool for {self.db_type.value}",
            ).with_context(backend=self.db_type.value)

        logger.info("pool_created", **self._config.describe(), max_size=self._config.pool_size)

    async def disconnect(self) -> None:
        """Close the pool. No-op when not connected."""
        if self._pool is None:
            return
        pool, self._pool = self._pool, None
        await self._close_pool(pool)
        logger.info("pool_closed", backend=self.db_type.value)

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[Any]:
        """Borrow a connection from the pool for the duration of the block.

        Raises:
            ConnectionUnavailableError: the pool is not open. Only
                ``connect()`` opens it; a closed adapter stays closed.
        """
        pool = self._pool
        if pool is None:
            raise ConnectionUnavailableError(
                f"{self.db_type.value} adapter is not connected",
            ).with_context(backend=self.db_type.value)

        if self._pool_stats(pool)["free_size"] == 0:
            logger.debug("connection_waiting", backend=self.db_type.value)

        async with pool.acquire() as conn:
            logger.debug("connection_acquired", backend=self.db_type.value, connection=id(conn))
            try:
                yield conn
            finally:
                logger.debug("connection_released", backend=self.db_type.value, connection=id(conn))

    # -- Queries ------------------------------------------------------------

    async def fetch(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Run native ``sql`` and return the driver's raw result."""
        async with self.acquire() as conn:
            return await self._run(conn, sql, tuple(params))

    async def health_check(self) -> dict[str, Any]:
        """Check the pool and return statistics.

        Returns a dict with ``size``, ``free_size``, ``min_size``,
        ``max_size`` and ``healthy``; on failure ``healthy`` is False and
        ``error`` holds the message.
        """
        try:
            await self.fetch("SELECT 1")
            return {**self._pool_stats(self._pool), "healthy": True}
        except Exception as e:
            logger.error("pool_health_check_failed", backend=self.db_type.value, error=str(e))
            return {
                "size": 0,
                "free_size": 0,
                "min_size": 0,
                "max_size": 0,
                "healthy": False,
                "error": str(e),
            }


__all__ = [
    "DatabaseAdapter",
]
