"""
Shared pytest fixtures for drupal-access tests.

Fixtures are auto-discovered by pytest; reusable non-fixture helpers live
in ``tests._support``.
"""

from __future__ import annotations

import pytest

from drupal_access.adapters.types import DatabaseConfig
from drupal_access.user import PermissionResolver
from tests._support import ScriptedQuery


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test without an explicit marker as a unit test."""
    for item in items:
        if "integration" in item.path.parts:
            item.add_marker(pytest.mark.integration)
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def scripted_query() -> ScriptedQuery:
    return ScriptedQuery()


@pytest.fixture
def resolver(scripted_query: ScriptedQuery) -> PermissionResolver:
    return PermissionResolver(scripted_query)


@pytest.fixture
def mysql_config() -> DatabaseConfig:
    return DatabaseConfig.from_options(
        {
            "driver": "mysql",
            "host": "localhost",
            "port": 3306,
            "user": "drupal",
            "password": "drupal",
            "database": "drupal",
        }
    )


@pytest.fixture
def pgsql_config() -> DatabaseConfig:
    return DatabaseConfig.from_options(
        {
            "driver": "pgsql",
            "host": "localhost",
            "user": "drupal",
            "password": "drupal",
            "database": "drupal",
        }
    )
