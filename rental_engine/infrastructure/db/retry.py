"""
Database retry utilities for handling transient failures.

Provides a retry helper and a decorator for automatically retrying units of
work that fail due to deadlocks, lock timeouts or other transient errors
reported by the store.
"""

import asyncio
import logging
from functools import wraps
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError

from rental_engine.domain.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# MySQL error codes
MYSQL_DEADLOCK_ERROR = "1213"
MYSQL_LOCK_WAIT_TIMEOUT = "1205"

# Driver messages for the same condition in other engines
TRANSIENT_LOCK_MESSAGES = (
    "database is locked",  # SQLite
    "deadlock detected",  # PostgreSQL
)


def is_deadlock_error(error: Exception) -> bool:
    """
    Check if an exception is a transient lock failure worth retrying.

    Args:
        error: The exception to check

    Returns:
        True if the error is a deadlock/lock timeout, or a store failure
        already flagged as retryable
    """
    if isinstance(error, StoreUnavailableError):
        return error.retryable
    if isinstance(error, (OperationalError, DBAPIError)):
        error_str = str(error)
        if MYSQL_DEADLOCK_ERROR in error_str or MYSQL_LOCK_WAIT_TIMEOUT in error_str:
            return True
        lowered = error_str.lower()
        return any(message in lowered for message in TRANSIENT_LOCK_MESSAGES)
    return False


async def retry_on_deadlock(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 0.1,
) -> T:
    """
    Retry a function if it fails due to a database deadlock.

    Uses exponential backoff: base_delay * (2 ** attempt)

    Args:
        func: The async function to execute
        max_attempts: Maximum number of attempts (default: 3)
        base_delay: Base delay in seconds for exponential backoff (default: 0.1)

    Returns:
        The result of the function call

    Raises:
        The original exception if max attempts exceeded or non-deadlock error
    """
    for attempt in range(max_attempts):
        try:
            return await func()
        except Exception as e:
            if not is_deadlock_error(e):
                raise

            if attempt >= max_attempts - 1:
                logger.error(
                    "Database deadlock persists after max retries",
                    extra={
                        "attempts": max_attempts,
                        "error": str(e),
                    },
                )
                raise

            delay = base_delay * (2**attempt)
            logger.warning(
                "Database deadlock detected, retrying",
                extra={
                    "attempt": attempt + 1,
                    "max_attempts": max_attempts,
                    "retry_delay": delay,
                    "error": str(e),
                },
            )
            await asyncio.sleep(delay)

    raise RuntimeError("retry_on_deadlock requires max_attempts >= 1")


def with_deadlock_retry(max_attempts: int = 3, base_delay: float = 0.1):
    """
    Decorator to automatically retry async functions on database deadlocks.

    Example:
        @with_deadlock_retry(max_attempts=3)
        async def run_reconcile(now):
            ...
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            async def execute():
                return await func(*args, **kwargs)

            return await retry_on_deadlock(execute, max_attempts, base_delay)

        return wrapper

    return decorator
