"""
User, role and permission resolution.

Async counterparts of Drupal core's ``user_load()``,
``user_role_permissions()`` and ``user_access()``, plus a database-session
lookup. There is no global user object: every access check takes the
account explicitly.

Manifesto:
    - **Sequential where dependent:** a user's roles are loaded only after
      the user row, and ``load_user`` returns only when both are done
    - **Concurrent where independent:** per-role permission queries fan
      out together and are joined once
    - **Caller-held cache:** resolved permissions are handed back so the
      caller can keep them on the account for later checks

Architecture:
    ::

        load_user(uid)
          users ──► user__roles            (sequential)

        role_permissions([r1, r2, r3])
          config[user.role.r1] ─┐
          config[user.role.r2] ─┼─► gather ─► flat list   (concurrent)
          config[user.role.r3] ─┘

        check_access(perm, account)
          uid == 1            ──► granted
          account.permissions ──► membership
          otherwise           ──► role_permissions(account.roles)

Examples:
    >>> resolver = PermissionResolver(QueryAdapter(manager))
    >>> account = await resolver.load_user(42)
    >>> account.roles
    ['authenticated', 'editor']
    >>> await resolver.user_access("edit any article content", account)
    True

Tags:
    users, roles, permissions, access-control, drupal-access
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import phpserialize

from drupal_access.errors import (
    RoleDataDecodeError,
    SessionNotFoundError,
    UserNotFoundError,
)
from drupal_access.logging import get_logger
from drupal_access.query import QueryAdapter
from drupal_access.settings import DrupalAccessSettings, get_settings

logger = get_logger(__name__)

ANONYMOUS_ROLE = "anonymous"
AUTHENTICATED_ROLE = "authenticated"
SUPERUSER_UID = 1

USER_QUERY = "SELECT * FROM users WHERE uid = $1;"
USER_ROLES_QUERY = "SELECT roles_target_id FROM user__roles WHERE entity_id = $1;"
ROLE_CONFIG_QUERY = "SELECT data FROM config WHERE name = $1;"
SESSION_QUERY = "SELECT * FROM sessions WHERE sid = $1;"

ROLE_CONFIG_PREFIX = "user.role."


@dataclass
class User:
    """A loaded account.

    ``fields`` holds every column of the ``users`` row. ``permissions`` is
    None until a caller stores a resolved permission list on it.
    """

    uid: Any
    roles: list[str] = field(default_factory=list)
    fields: dict[str, Any] = field(default_factory=dict)
    permissions: list[str] | None = None

    @property
    def is_anonymous(self) -> bool:
        return not self.uid

    @property
    def is_superuser(self) -> bool:
        return self.uid == SUPERUSER_UID

    def __getitem__(self, key: str) -> Any:
        return self.fields[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)


@dataclass(frozen=True)
class AccessResult:
    """Outcome of an access check.

    ``permissions`` is the freshly resolved list when a lookup happened and
    None when the answer came from the superuser rule or an existing cache.
    Truthiness follows ``granted``.
    """

    granted: bool
    permissions: list[str] | None = None

    def __bool__(self) -> bool:
        return self.granted


def decode_role_permissions(role: str, data: Any) -> list[str]:
    """Extract permission names from a PHP-serialized role config payload.

    Raises:
        RoleDataDecodeError: ``data`` is not a valid serialized structure.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    try:
        payload = phpserialize.loads(data, decode_strings=True)
    except (ValueError, TypeError, AttributeError) as e:
        raise RoleDataDecodeError(role, cause=e) from e

    if not isinstance(payload, Mapping):
        raise RoleDataDecodeError(role)

    permissions = payload.get("permissions")
    if not permissions:
        return []
    if isinstance(permissions, Mapping):
        return list(permissions.values())
    if isinstance(permissions, (list, tuple)):
        return list(permissions)
    raise RoleDataDecodeError(role)


class PermissionResolver:
    """Loads users and sessions and answers permission checks.

    Args:
        query: the query adapter to run lookups through
        strict_decode: raise :class:`RoleDataDecodeError` on a malformed
            role payload instead of skipping it with a warning
    """

    def __init__(self, query: QueryAdapter, *, strict_decode: bool = False):
        self._query = query
        self._strict_decode = strict_decode

    @classmethod
    def from_settings(
        cls, query: QueryAdapter, settings: DrupalAccessSettings | None = None
    ) -> PermissionResolver:
        """Build a resolver whose decode strictness comes from ``strict_role_decode``."""
        settings = settings or get_settings()
        return cls(query, strict_decode=settings.strict_role_decode)

    @property
    def strict_decode(self) -> bool:
        return self._strict_decode

    async def load_user(self, uid: Any) -> User:
        """Fetch a user by numeric id, with roles populated.

        Raises:
            UserNotFoundError: no ``users`` row matches.
        """
        rows = await self._query.execute(USER_QUERY, [uid])
        if not rows:
            raise UserNotFoundError(uid)

        row = rows[0]
        user = User(uid=row.get("uid"), fields=dict(row))

        if user.uid:
            user.roles.append(AUTHENTICATED_ROLE)
            role_rows = await self._query.execute(USER_ROLES_QUERY, [user.uid])
            user.roles.extend(r["roles_target_id"] for r in role_rows)
        else:
            user.roles.append(ANONYMOUS_ROLE)

        logger.debug("user_loaded", uid=user.uid, roles=user.roles)
        return user

    async def _permissions_for_role(self, role: str) -> list[str]:
        rows = await self._query.execute(ROLE_CONFIG_QUERY, [ROLE_CONFIG_PREFIX + role])
        permissions: list[str] = []
        for row in rows:
            try:
                permissions.extend(decode_role_permissions(role, row["data"]))
            except RoleDataDecodeError as e:
                if self._strict_decode:
                    raise
                logger.warning("role_permissions_skipped", role=role, error=str(e.cause or e))
        return permissions

    async def role_permissions(self, roles: Sequence[str]) -> list[str]:
        """All permissions granted to ``roles``, flattened.

        Queries run concurrently; the result lists each role's permissions
        in ``roles`` order. Duplicates across roles are kept.
        """
        if not roles:
            return []

        per_role = await asyncio.gather(*(self._permissions_for_role(role) for role in roles))
        return [permission for permissions in per_role for permission in permissions]

    async def check_access(self, permission: str, account: User) -> AccessResult:
        """Whether ``account`` holds ``permission``.

        The superuser (uid 1) is always granted. A preset
        ``account.permissions`` is used as-is; otherwise the account's roles
        are resolved and the list is returned on the result for caching.
        """
        if account.uid == SUPERUSER_UID:
            return AccessResult(granted=True)

        if account.permissions is not None:
            return AccessResult(granted=permission in account.permissions)

        permissions = await self.role_permissions(account.roles)
        return AccessResult(granted=permission in permissions, permissions=permissions)

    async def user_access(self, permission: str, account: User) -> bool:
        """``check_access`` that also caches resolved permissions on the account."""
        result = await self.check_access(permission, account)
        if result.permissions is not None:
            account.permissions = result.permissions
        return result.granted

    async def load_session(self, sid: str) -> dict[str, Any]:
        """Fetch a row from the database session table.

        Only Drupal's default database session backend is supported.

        Raises:
            SessionNotFoundError: no ``sessions`` row matches.
        """
        rows = await self._query.execute(SESSION_QUERY, [sid])
        if not rows:
            raise SessionNotFoundError(sid)
        return rows[0]


__all__ = [
    "ANONYMOUS_ROLE",
    "AUTHENTICATED_ROLE",
    "SUPERUSER_UID",
    "User",
    "AccessResult",
    "PermissionResolver",
    "decode_role_permissions",
]
