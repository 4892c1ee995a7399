"""PostgreSQL database adapter.

Uses ``asyncpg``, whose native ``$1, $2`` placeholders already match the
canonical query syntax, so query text reaches the driver unchanged. The
pool is created lazily on first use.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import asyncpg

from .base import DatabaseAdapter
from .types import DatabaseType


class PostgreSQLAdapter(DatabaseAdapter):
    """PostgreSQL adapter backed by an ``asyncpg`` pool."""

    db_type = DatabaseType.PGSQL

    async def _create_pool(self) -> Any:
        cfg = self._config
        return await asyncpg.create_pool(
            host=cfg.host,
            port=cfg.port,
            user=cfg.user,
            password=cfg.password,
            database=cfg.database,
            min_size=cfg.pool_min_size,
            max_size=cfg.pool_size,
            timeout=cfg.connect_timeout,
        )

    async def _close_pool(self, pool: Any) -> None:
        await pool.close()

    def _pool_stats(self, pool: Any) -> dict[str, int]:
        return {
            "size": pool.get_size(),
            "free_size": pool.get_idle_size(),
            "min_size": pool.get_min_size(),
            "max_size": pool.get_max_size(),
        }

    async def _run(self, conn: Any, sql: str, params: Sequence[Any]) -> Any:
        return await conn.fetch(sql, *params)


__all__ = [
    "PostgreSQLAdapter",
]
