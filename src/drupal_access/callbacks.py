"""Completion-callback bridge.

Runs any drupal-access coroutine as a task and reports its outcome through
a node-style ``callback(error, result)``, invoked exactly once:
``callback(None, result)`` on success, ``callback(error, None)`` on failure.

Examples:
    >>> def done(err, user):
    ...     if err:
    ...         print("failed:", err)
    ...     else:
    ...         print("roles:", user.roles)
    >>> task = call_with_callback(resolver.load_user(42), done)
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from drupal_access.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Callback = Callable[[BaseException | None, Any], None]

# The event loop only keeps weak references to tasks.
_pending: set[asyncio.Task] = set()


async def _deliver(awaitable: Awaitable[T], callback: Callback) -> T | None:
    try:
        result = await awaitable
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.debug("callback_error_delivered", error_type=type(e).__name__)
        callback(e, None)
        return None
    callback(None, result)
    return result


def call_with_callback(awaitable: Awaitable[T], callback: Callback) -> asyncio.Task:
    """Schedule ``awaitable`` on the running loop and report via ``callback``.

    The returned task resolves to the result (or None after an error), so
    callers that prefer awaiting can still do so. The task is kept alive
    until it finishes, so the return value may be dropped.
    """
    task = asyncio.ensure_future(_deliver(awaitable, callback))
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task


__all__ = [
    "Callback",
    "call_with_callback",
]
