"""Tests for drupal_access.query module."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from drupal_access.database import ConnectionManager
from drupal_access.errors import (
    ConfigurationMissingError,
    ConnectionUnavailableError,
    QueryParameterError,
    QueryTimeoutError,
)
from drupal_access.query import QueryAdapter, normalize_rows
from tests._support import make_mysql_pool, make_pgsql_pool


class TestNormalizeRows:
    def test_none(self):
        assert normalize_rows(None) == []

    def test_plain_sequence(self):
        assert normalize_rows(({"uid": 1},)) == [{"uid": 1}]

    def test_mapping_envelope(self):
        assert normalize_rows({"rows": [{"uid": 1}], "rowCount": 1}) == [{"uid": 1}]

    def test_mapping_envelope_without_rows(self):
        assert normalize_rows({"rowCount": 0}) == []

    def test_attribute_envelope(self):
        result = SimpleNamespace(rows=[{"sid": "abc"}], rowcount=1)
        assert normalize_rows(result) == [{"sid": "abc"}]

    def test_record_like_rows_become_dicts(self):
        # asyncpg.Record supports the mapping protocol; a list of pairs stands in
        rows = normalize_rows([[("uid", 1), ("name", "admin")]])
        assert rows == [{"uid": 1, "name": "admin"}]
        assert type(rows[0]) is dict


class TestExecuteMySQL:
    @pytest.mark.asyncio
    @patch("aiomysql.create_pool", new_callable=AsyncMock)
    async def test_placeholders_translated(self, mock_create_pool):
        pool, cursor = make_mysql_pool(({"uid": 42, "name": "jane"},))
        mock_create_pool.return_value = pool

        manager = ConnectionManager()
        await manager.configure({"driver": "mysql"})
        rows = await QueryAdapter(manager).execute(
            "SELECT * FROM users WHERE uid = $1 AND status = $2", [42, 1]
        )

        assert rows == [{"uid": 42, "name": "jane"}]
        cursor.execute.assert_awaited_once_with(
            "SELECT * FROM users WHERE uid = %s AND status = %s", (42, 1)
        )

    @pytest.mark.asyncio
    @patch("aiomysql.create_pool", new_callable=AsyncMock)
    async def test_bad_placeholder_never_reaches_driver(self, mock_create_pool):
        pool, cursor = make_mysql_pool()
        mock_create_pool.return_value = pool

        manager = ConnectionManager()
        await manager.configure({"driver": "mysql"})
        with pytest.raises(QueryParameterError):
            await QueryAdapter(manager).execute("SELECT $2", ["x"])
        cursor.execute.assert_not_awaited()

    @pytest.mark.asyncio
    @patch("aiomysql.create_pool", new_callable=AsyncMock)
    async def test_driver_error_propagates_unchanged(self, mock_create_pool):
        pool, cursor = make_mysql_pool()
        boom = RuntimeError("Table 'drupal.users' doesn't exist")
        cursor.execute.side_effect = boom
        mock_create_pool.return_value = pool

        manager = ConnectionManager()
        await manager.configure({"driver": "mysql"})
        with pytest.raises(RuntimeError) as exc:
            await QueryAdapter(manager).execute("SELECT * FROM users")
        assert exc.value is boom


class TestExecutePostgreSQL:
    @pytest.mark.asyncio
    @patch("asyncpg.create_pool", new_callable=AsyncMock)
    async def test_query_passed_through(self, mock_create_pool):
        pool, conn = make_pgsql_pool([{"sid": "abc", "uid": 3}])
        mock_create_pool.return_value = pool

        manager = ConnectionManager()
        await manager.configure({"driver": "pgsql"})
        rows = await QueryAdapter(manager).execute("SELECT * FROM sessions WHERE sid = $1;", ["abc"])

        assert rows == [{"sid": "abc", "uid": 3}]
        conn.fetch.assert_awaited_once_with("SELECT * FROM sessions WHERE sid = $1;", "abc")

    @pytest.mark.asyncio
    @patch("asyncpg.create_pool", new_callable=AsyncMock)
    async def test_fetch_one(self, mock_create_pool):
        mock_create_pool.return_value, _ = make_pgsql_pool([{"uid": 1}, {"uid": 2}])

        manager = ConnectionManager()
        await manager.configure({"driver": "pgsql"})
        query = QueryAdapter(manager)

        assert await query.fetch_one("SELECT uid FROM users") == {"uid": 1}

    @pytest.mark.asyncio
    @patch("asyncpg.create_pool", new_callable=AsyncMock)
    async def test_fetch_one_empty(self, mock_create_pool):
        mock_create_pool.return_value, _ = make_pgsql_pool([])

        manager = ConnectionManager()
        await manager.configure({"driver": "pgsql"})
        assert await QueryAdapter(manager).fetch_one("SELECT uid FROM users") is None


class TestExecuteFailures:
    @pytest.mark.asyncio
    async def test_unconfigured(self):
        with pytest.raises(ConfigurationMissingError):
            await QueryAdapter(ConnectionManager()).execute("SELECT 1")

    @pytest.mark.asyncio
    async def test_unsupported_driver(self):
        manager = ConnectionManager()
        await manager.configure({"driver": "sqlite"})
        with pytest.raises(ConnectionUnavailableError, match="Could not connect"):
            await QueryAdapter(manager).execute("SELECT 1")

    @pytest.mark.asyncio
    @patch("asyncpg.create_pool", new_callable=AsyncMock)
    async def test_deadline_expired(self, mock_create_pool):
        pool, conn = make_pgsql_pool()

        async def slow_fetch(*args):
            await asyncio.sleep(1)
            return []

        conn.fetch.side_effect = slow_fetch
        mock_create_pool.return_value = pool

        manager = ConnectionManager()
        await manager.configure({"driver": "pgsql"})
        with pytest.raises(QueryTimeoutError) as exc:
            await QueryAdapter(manager).execute("SELECT pg_sleep(1)", timeout=0.01)

        assert exc.value.retryable is True
        assert exc.value.context.backend == "pgsql"
        assert exc.value.context.query == "SELECT pg_sleep(1)"

    @pytest.mark.asyncio
    @patch("asyncpg.create_pool", new_callable=AsyncMock)
    async def test_configured_deadline_used_by_default(self, mock_create_pool):
        pool, conn = make_pgsql_pool()

        async def slow_fetch(*args):
            await asyncio.sleep(1)
            return []

        conn.fetch.side_effect = slow_fetch
        mock_create_pool.return_value = pool

        manager = ConnectionManager()
        await manager.configure({"driver": "pgsql", "query_timeout": 0.01})
        with pytest.raises(QueryTimeoutError):
            await QueryAdapter(manager).execute("SELECT pg_sleep(1)")
