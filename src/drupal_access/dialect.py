"""SQL dialect abstraction for backend-agnostic query text.

Callers always write queries with numbered ``$1, $2, ...`` placeholders,
which is PostgreSQL's native style. Each ``Dialect`` turns such a query and
its parameter sequence into the form its driver expects.

Manifesto:
    Query text should look the same no matter which backend runs it. The
    dialect layer is the only place that knows about ``%s`` vs ``$1``.

    - **One interface:** Dialect protocol for placeholder translation
    - **Zero coupling:** Dialects never import a database driver
    - **Positional safety:** Numbered placeholders map to the right value
      even when repeated or out of order

Architecture::

    QueryAdapter.execute("... uid = $1 AND status = $2", [42, 1])
                              │
              ┌───────────────┴────────────────┐
              ▼                                ▼
    ┌───────────────────┐            ┌───────────────────┐
    │ MySQLDialect      │            │ PostgreSQLDialect │
    │ uid = %s ... %s   │            │ unchanged         │
    │ params re-ordered │            │ params unchanged  │
    └───────────────────┘            └───────────────────┘

Examples:
    >>> from drupal_access.dialect import get_dialect
    >>> get_dialect("mysql").translate("SELECT $2, $1", ["a", "b"])
    ('SELECT %s, %s', ('b', 'a'))
    >>> get_dialect("pgsql").translate("SELECT $2, $1", ["a", "b"])
    ('SELECT $2, $1', ('a', 'b'))

Tags:
    dialect, sql, placeholders, mysql, postgresql, drupal-access
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from drupal_access.errors import QueryParameterError

# Comments and quoted literals pass through untouched, so a placeholder or an
# apostrophe inside them neither binds a parameter nor opens a literal.
_TOKEN_RE = re.compile(
    r"""
    (?P<comment>--(?=[ \t\r\n]|\Z)[^\n]*|\#[^\n]*|/\*.*?\*/)
    | (?P<literal>'(?:[^'\\]|\\.|'')*'|"(?:[^"\\]|\\.|"")*")
    | \$(?P<index>\d+)
    | (?P<percent>%)
    """,
    re.VERBOSE | re.DOTALL,
)


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract."""

    @property
    def name(self) -> str:
        """Backend name (e.g. ``'mysql'``)."""
        ...

    def placeholder(self, index: int) -> str:
        """Native positional placeholder for the 0-based ``index``."""
        ...

    def translate(self, query: str, params: Sequence[Any] = ()) -> tuple[str, tuple[Any, ...]]:
        """Rewrite canonical ``$N`` query text and params for this backend."""
        ...


class MySQLDialect:
    """MySQL dialect: anonymous ``%s`` placeholders (aiomysql / PyMySQL).

    Every ``$N`` is replaced by ``%s`` and the parameters are re-emitted in
    occurrence order, so ``$2 ... $1 ... $2`` yields three bound values.
    Literal ``%`` characters are doubled because the driver interpolates
    with ``%``. Quoted strings and ``-- ``, ``#`` and ``/* */`` comments are
    copied verbatim apart from that doubling.
    """

    @property
    def name(self) -> str:
        return "mysql"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def translate(self, query: str, params: Sequence[Any] = ()) -> tuple[str, tuple[Any, ...]]:
        params = tuple(params or ())
        ordered: list[Any] = []

        def _replace(match: re.Match[str]) -> str:
            if match.lastgroup in ("comment", "literal"):
                return match.group(0).replace("%", "%%")
            if match.lastgroup == "percent":
                return "%%"
            position = int(match.group("index"))
            if position < 1 or position > len(params):
                raise QueryParameterError(
                    f"Placeholder ${position} has no matching parameter "
                    f"({len(params)} given)"
                ).with_context(query=query)
            ordered.append(params[position - 1])
            return "%s"

        return _TOKEN_RE.sub(_replace, query), tuple(ordered)


class PostgreSQLDialect:
    """PostgreSQL dialect: native ``$1, $2`` placeholders (asyncpg)."""

    @property
    def name(self) -> str:
        return "pgsql"

    def placeholder(self, index: int) -> str:
        return f"${index + 1}"

    def translate(self, query: str, params: Sequence[Any] = ()) -> tuple[str, tuple[Any, ...]]:
        return query, tuple(params or ())


# =========================================================================
# Registry / Factory
# =========================================================================

_DIALECTS: dict[str, Dialect] = {
    "mysql": MySQLDialect(),
    "pgsql": PostgreSQLDialect(),
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by backend name.

    Raises:
        ValueError: If ``db_type`` is not recognised.
    """
    key = db_type.lower() if isinstance(db_type, str) else db_type.value
    if key not in _DIALECTS:
        raise ValueError(f"Unknown dialect '{db_type}'. Supported: {sorted(_DIALECTS)}")
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation (drivers or test doubles)."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "Dialect",
    "MySQLDialect",
    "PostgreSQLDialect",
    "get_dialect",
    "register_dialect",
]
