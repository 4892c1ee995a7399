"""
drupal-access - async emulation of Drupal's database and user/permission layer.

Modules
-------
errors        Typed error hierarchy
logging       structlog configuration
settings      Environment-driven settings (pydantic-settings)
dialect       ``$N`` placeholder translation per backend
adapters      Pooled MySQL (aiomysql) and PostgreSQL (asyncpg) adapters
database      ConnectionManager: configure once, get-or-create handle
query         QueryAdapter: ``db_query()`` with normalized rows
user          PermissionResolver: users, roles, permissions, sessions
callbacks     ``(error, result)`` completion-callback bridge

Examples:
    >>> from drupal_access import ConnectionManager, QueryAdapter, PermissionResolver
    >>> manager = ConnectionManager()
    >>> await manager.configure({"driver": "mysql", "host": "localhost",
    ...                          "user": "drupal", "password": "drupal",
    ...                          "database": "drupal"})
    >>> resolver = PermissionResolver(QueryAdapter(manager))
    >>> account = await resolver.load_user(42)
    >>> await resolver.user_access("access content", account)
    True
"""

from drupal_access.callbacks import call_with_callback
from drupal_access.database import ConnectionManager
from drupal_access.errors import (
    ConfigurationMissingError,
    ConnectionUnavailableError,
    DrupalAccessError,
    QueryTimeoutError,
    RoleDataDecodeError,
    SessionNotFoundError,
    UserNotFoundError,
)
from drupal_access.query import QueryAdapter
from drupal_access.settings import DrupalAccessSettings, get_settings
from drupal_access.user import AccessResult, PermissionResolver, User

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ConnectionManager",
    "QueryAdapter",
    "PermissionResolver",
    "User",
    "AccessResult",
    "DrupalAccessSettings",
    "get_settings",
    "call_with_callback",
    "DrupalAccessError",
    "ConfigurationMissingError",
    "ConnectionUnavailableError",
    "QueryTimeoutError",
    "RoleDataDecodeError",
    "SessionNotFoundError",
    "UserNotFoundError",
]
