"""MySQL database adapter.

Uses ``aiomysql``. MySQL uses **format** (``%s``) placeholder style; the
``MySQLDialect`` rewrites canonical ``$N`` query text before it gets here.

MySQL is the pool-capable backend: the connection manager opens its pool
as soon as it is configured rather than on first query.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import aiomysql

from .base import DatabaseAdapter
from .types import DatabaseType


class MySQLAdapter(DatabaseAdapter):
    """MySQL / MariaDB adapter backed by an ``aiomysql`` pool.

    Rows come back as dicts (``DictCursor``); statements autocommit.
    """

    db_type = DatabaseType.MYSQL
    eager_connect = True

    async def _create_pool(self) -> Any:
        cfg = self._config
        return await aiomysql.create_pool(
            host=cfg.host,
            port=cfg.port,
            user=cfg.user,
            password=cfg.password or "",
            db=cfg.database,
            minsize=cfg.pool_min_size,
            maxsize=cfg.pool_size,
            connect_timeout=cfg.connect_timeout,
            autocommit=True,
            charset="utf8mb4",
        )

    async def _close_pool(self, pool: Any) -> None:
        pool.close()
        await pool.wait_closed()

    def _pool_stats(self, pool: Any) -> dict[str, int]:
        return {
            "size": pool.size,
            "free_size": pool.freesize,
            "min_size": pool.minsize,
            "max_size": pool.maxsize,
        }

    async def _run(self, conn: Any, sql: str, params: Sequence[Any]) -> Any:
        # Always pass a tuple so "%%" escapes are collapsed by the driver.
        async with conn.cursor(aiomysql.DictCursor) as cursor:
            await cursor.execute(sql, tuple(params))
            return await cursor.fetchall()


__all__ = [
    "MySQLAdapter",
]
