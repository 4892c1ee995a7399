"""
Query adapter - ``db_query()`` for both backends.

Callers write every query with canonical ``$1, $2, ...`` placeholders. The
adapter fetches the handle from the connection manager, lets the handle's
dialect translate the query for its driver, runs it, and hands back a plain
list of dict rows whatever envelope the driver returned.

Examples:
    >>> query = QueryAdapter(manager)
    >>> rows = await query.execute("SELECT * FROM users WHERE uid = $1", [42])
    >>> rows[0]["name"]
    'admin'

Guardrails:
    - Driver exceptions propagate unchanged: no retry, no partial rows
    - A missing handle fails before anything is sent to the backend
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

from drupal_access.database import ConnectionManager
from drupal_access.errors import ConnectionUnavailableError, QueryTimeoutError
from drupal_access.logging import get_logger

logger = get_logger(__name__)


def normalize_rows(result: Any) -> list[dict[str, Any]]:
    """Turn a driver result into a list of plain dicts.

    An envelope exposing ``rows`` (as an attribute or a mapping key) is
    unwrapped; anything else is treated as the row sequence itself.
    """
    if result is None:
        return []
    if isinstance(result, Mapping):
        result = result.get("rows", [])
    elif hasattr(result, "rows"):
        result = result.rows
    return [dict(row) for row in (result or [])]


class QueryAdapter:
    """Backend-agnostic query execution over a :class:`ConnectionManager`."""

    def __init__(self, manager: ConnectionManager):
        self._manager = manager

    @property
    def manager(self) -> ConnectionManager:
        return self._manager

    async def execute(
        self,
        query: str,
        params: Sequence[Any] = (),
        *,
        timeout: float | None = None,
    ) -> list[dict[str, Any]]:
        """Run ``query`` and return its rows.

        Args:
            query: SQL using ``$1, $2, ...`` placeholders
            params: positional values for the placeholders
            timeout: deadline in seconds; defaults to the configured
                ``query_timeout`` (None means no deadline)

        Raises:
            ConfigurationMissingError: the manager was never configured
            ConnectionUnavailableError: no handle could be obtained
            QueryTimeoutError: the deadline expired
        """
        handle = await self._manager.get_handle()
        if handle is None:
            raise ConnectionUnavailableError("Could not connect to the database")

        sql, args = handle.dialect.translate(query, params)

        if timeout is None:
            timeout = handle.config.query_timeout

        if timeout is None:
            result = await handle.fetch(sql, args)
        else:
            try:
                result = await asyncio.wait_for(handle.fetch(sql, args), timeout=timeout)
            except asyncio.TimeoutError as e:
                logger.warning("query_timeout", backend=handle.dialect.name, timeout=timeout)
                raise QueryTimeoutError(timeout, cause=e).with_context(
                    backend=handle.dialect.name, query=query
                ) from e

        return normalize_rows(result)

    async def fetch_one(
        self,
        query: str,
        params: Sequence[Any] = (),
        *,
        timeout: float | None = None,
    ) -> dict[str, Any] | None:
        """Execute ``query`` and return the first row, or None."""
        rows = await self.execute(query, params, timeout=timeout)
        return rows[0] if rows else None


__all__ = [
    "QueryAdapter",
    "normalize_rows",
]
