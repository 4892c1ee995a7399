"""
Test support utilities for drupal-access tests.

Helpers that are not fixtures but are shared across test files:
query doubles, PHP-serialized payload builders, and driver pool mocks.
"""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import phpserialize


class ScriptedQuery:
    """Stand-in for QueryAdapter answering from canned rows.

    Responses are keyed by ``(sql, first_param)``. Each key may carry a
    delay (to force a completion order) or an error to raise.
    """

    def __init__(self):
        self.responses: dict[tuple[str, Any], list[dict[str, Any]]] = {}
        self.errors: dict[tuple[str, Any], Exception] = {}
        self.delays: dict[tuple[str, Any], float] = {}
        self.calls: list[tuple[str, list[Any]]] = []
        self.completed: list[tuple[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def add(self, sql: str, key: Any, rows: list[dict[str, Any]], delay: float = 0.0) -> None:
        self.responses[(sql, key)] = rows
        if delay:
            self.delays[(sql, key)] = delay

    def fail(self, sql: str, key: Any, error: Exception) -> None:
        self.errors[(sql, key)] = error

    async def execute(self, sql: str, params=(), *, timeout=None):
        params = list(params)
        key = (sql, params[0] if params else None)
        self.calls.append((sql, params))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(key, 0))
            if key in self.errors:
                raise self.errors[key]
            return list(self.responses.get(key, []))
        finally:
            self.in_flight -= 1
            self.completed.append(key)


def role_payload(*permissions: str, **extra: Any) -> bytes:
    """PHP-serialize a role config entry the way Drupal stores it."""
    data: dict[str, Any] = {"id": "role", "permissions": dict(enumerate(permissions))}
    data.update(extra)
    return phpserialize.dumps(data)


def make_mock_pool(conn: Any, **stats: Any) -> MagicMock:
    """MagicMock pool whose ``acquire()`` yields ``conn`` under ``async with``.

    Keyword arguments become attributes (aiomysql style ``freesize=...``).
    """
    pool = MagicMock()
    pool.acquire.return_value.__aenter__ = AsyncMock(return_value=conn)
    pool.acquire.return_value.__aexit__ = AsyncMock(return_value=False)
    for name, value in stats.items():
        setattr(pool, name, value)
    return pool


def make_mysql_pool(rows: Any = ()) -> tuple[MagicMock, MagicMock]:
    """aiomysql-shaped pool returning ``rows`` from ``cursor.fetchall()``."""
    cursor = MagicMock()
    cursor.execute = AsyncMock()
    cursor.fetchall = AsyncMock(return_value=rows)

    conn = MagicMock()
    conn.cursor.return_value.__aenter__ = AsyncMock(return_value=cursor)
    conn.cursor.return_value.__aexit__ = AsyncMock(return_value=False)

    pool = make_mock_pool(conn, size=1, freesize=1, minsize=1, maxsize=10)
    pool.wait_closed = AsyncMock()
    return pool, cursor


def make_pgsql_pool(rows: Any = ()) -> tuple[MagicMock, MagicMock]:
    """asyncpg-shaped pool returning ``rows`` from ``conn.fetch()``."""
    conn = MagicMock()
    conn.fetch = AsyncMock(return_value=rows)

    pool = make_mock_pool(conn)
    pool.get_size.return_value = 1
    pool.get_idle_size.return_value = 1
    pool.get_min_size.return_value = 1
    pool.get_max_size.return_value = 10
    pool.close = AsyncMock()
    return pool, conn


__all__ = [
    "ScriptedQuery",
    "role_payload",
    "make_mock_pool",
    "make_mysql_pool",
    "make_pgsql_pool",
]
