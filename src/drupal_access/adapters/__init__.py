"""Database adapters -- one pooled async adapter per supported backend.

Architecture::

    DatabaseAdapter (base.py)        Abstract base: pool lifecycle, acquire, fetch
        |-- MySQLAdapter             aiomysql (eager pool)
        |-- PostgreSQLAdapter        asyncpg (lazy pool)

    AdapterRegistry (registry.py)    driver string -> adapter class
    DatabaseConfig (types.py)        connection parameters
    DatabaseType (types.py)          enum of supported backends

Tags:
    database, adapters, multi-backend, mysql, postgresql, drupal-access
"""

from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .postgresql import PostgreSQLAdapter
from .registry import AdapterRegistry, adapter_registry
from .types import DEFAULT_PORTS, DatabaseConfig, DatabaseType

__all__ = [
    "DatabaseType",
    "DatabaseConfig",
    "DEFAULT_PORTS",
    "DatabaseAdapter",
    "MySQLAdapter",
    "PostgreSQLAdapter",
    "AdapterRegistry",
    "adapter_registry",
]
