"""
Structured error types for drupal-access.

Every failure the data-access layer can report is a ``DrupalAccessError``
subclass carrying a category, a retry hint, structured context, and the
chained driver exception where one exists. Driver-reported query failures
are the exception: they propagate unchanged so callers see exactly what
the backend said.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure kind
    - **Explicit Retry Semantics:** Each error knows if it's retryable
    - **Rich Context:** Errors carry metadata for logging
    - **Error Chaining:** Preserve original exceptions as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                     DrupalAccessError                            │
        │         (category, retryable, context, cause)                    │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ConfigError          DatabaseError           NotFoundError      │
        │  (CONFIG)             (DATABASE)              (NOT_FOUND)        │
        │      │                    │                       │              │
        │  ConfigurationMissing ConnectionUnavailable   UserNotFound       │
        │  InvalidConfig        QueryTimeout            SessionNotFound    │
        │                                                                  │
        │  ParseError (PARSE)                                              │
        │      │                                                           │
        │  RoleDataDecodeError                                             │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> err = UserNotFoundError(42)
    >>> err.category
    <ErrorCategory.NOT_FOUND: 'NOT_FOUND'>
    >>> err.to_dict()["context"]
    {'user_id': 42}

Tags:
    error-handling, exception-hierarchy, drupal-access
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    DATABASE = "DATABASE"         # Connection pool, query timeout
    CONFIG = "CONFIG"             # Missing or invalid configuration
    NOT_FOUND = "NOT_FOUND"       # Requested record does not exist
    PARSE = "PARSE"               # Stored payload could not be decoded
    VALIDATION = "VALIDATION"     # Caller supplied an unusable query/params
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that were set appear in ``to_dict()``. Anything not covered
    by a typed field lands in ``metadata``.
    """

    backend: str | None = None
    query: str | None = None
    user_id: Any = None
    session_id: str | None = None
    role: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["backend", "query", "user_id", "session_id", "role"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DrupalAccessError(Exception):
    """
    Base exception for all drupal-access errors.

    Subclasses set ``default_category`` and ``default_retryable``; callers
    may override either per instance.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DrupalAccessError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ConnectionUnavailableError("Pool exhausted").with_context(
                backend="mysql",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(DrupalAccessError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class ConfigurationMissingError(ConfigError):
    """``configure()`` was never called on the connection manager."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "Connection options missing. Call configure() before any other "
            "database operation."
        )


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(DrupalAccessError):
    """Database connection or query error raised by this package."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


class ConnectionUnavailableError(DatabaseError):
    """No usable handle: unsupported backend or pool creation failure."""

    default_retryable = True


class QueryTimeoutError(DatabaseError):
    """Query did not complete before its deadline."""

    default_retryable = True

    def __init__(self, timeout: float, **kwargs: Any):
        self.timeout = timeout
        super().__init__(f"Query exceeded deadline of {timeout}s", **kwargs)


class QueryParameterError(DrupalAccessError):
    """A ``$N`` placeholder references a parameter that was not supplied."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False


# =============================================================================
# LOOKUP ERRORS
# =============================================================================


class NotFoundError(DrupalAccessError):
    """Requested record does not exist."""

    default_category = ErrorCategory.NOT_FOUND
    default_retryable = False


class UserNotFoundError(NotFoundError):
    def __init__(self, uid: Any):
        self.uid = uid
        super().__init__("User not found", context=ErrorContext(user_id=uid))


class SessionNotFoundError(NotFoundError):
    def __init__(self, sid: str):
        self.sid = sid
        super().__init__("Session not found", context=ErrorContext(session_id=sid))


# =============================================================================
# DECODE ERRORS
# =============================================================================


class ParseError(DrupalAccessError):
    """Stored data could not be decoded."""

    default_category = ErrorCategory.PARSE
    default_retryable = False


class RoleDataDecodeError(ParseError):
    """A role's serialized permission payload is malformed."""

    def __init__(self, role: str, cause: Exception | None = None):
        self.role = role
        super().__init__(
            f"Could not decode permission data for role {role!r}",
            context=ErrorContext(role=role),
            cause=cause,
        )


# =============================================================================
# HELPERS
# =============================================================================


def is_retryable(error: BaseException) -> bool:
    """Return True if ``error`` is a DrupalAccessError flagged retryable."""
    if isinstance(error, DrupalAccessError):
        return error.retryable
    return False


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DrupalAccessError",
    "ConfigError",
    "ConfigurationMissingError",
    "InvalidConfigError",
    "DatabaseError",
    "ConnectionUnavailableError",
    "QueryTimeoutError",
    "QueryParameterError",
    "NotFoundError",
    "UserNotFoundError",
    "SessionNotFoundError",
    "ParseError",
    "RoleDataDecodeError",
    "is_retryable",
]
