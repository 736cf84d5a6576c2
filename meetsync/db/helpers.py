"""
Query helpers for the store layer.

Driver failures come out as DatabaseError with a `recoverable` flag:
operational errors (dropped connection, timeout) may be retried, anything
else (bad SQL, constraint violations, closed pool) may not.
"""

import asyncio
import functools
from typing import Any

import psycopg

from meetsync.db.pool import DatabasePoolManager
from meetsync.infrastructure.observability.logging import get_logger
from meetsync.services.errors import StoreUnavailable

logger = get_logger(__name__)


class DatabaseError(StoreUnavailable):
    """Failed database operation; the store layer reads it as absent."""

    def __init__(self, message: str, operation: str = "unknown", recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


def _wrap(error: Exception, operation: str, query: str) -> DatabaseError:
    if isinstance(error, psycopg.Error):
        logger.error("Database query failed", operation=operation, query=query[:100], error=str(error))
        return DatabaseError(
            f"Query failed: {error}",
            operation=operation,
            recoverable=isinstance(error, psycopg.OperationalError),
        )
    return DatabaseError(str(error), operation=operation, recoverable=False)


async def fetch_one(
    pool: DatabasePoolManager, query: str, params: tuple = ()
) -> dict[str, Any] | None:
    """First row of the result as a dict, or None."""
    try:
        async with pool.connection() as conn:
            cursor = await conn.execute(query, params)
            return await cursor.fetchone()
    except (psycopg.Error, RuntimeError) as e:
        raise _wrap(e, "fetch_one", query) from e


async def execute_query(pool: DatabasePoolManager, query: str, params: tuple = ()) -> int:
    """Run a statement and return the affected row count."""
    try:
        async with pool.connection() as conn:
            cursor = await conn.execute(query, params)
            return cursor.rowcount
    except (psycopg.Error, RuntimeError) as e:
        raise _wrap(e, "execute", query) from e


def with_db_retry(max_retries: int = 2, base_delay: float = 0.1):
    """Retry recoverable DatabaseErrors with exponential backoff."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except DatabaseError as e:
                    if not e.recoverable or attempt >= max_retries:
                        raise
                    delay = base_delay * (2**attempt)
                    attempt += 1
                    logger.warning(
                        "Retrying database operation",
                        operation=func.__name__,
                        attempt=attempt,
                        delay=delay,
                        error=str(e),
                    )
                    await asyncio.sleep(delay)

        return wrapper

    return decorator
