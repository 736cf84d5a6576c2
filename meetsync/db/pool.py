"""
Connection pool for the Supabase Postgres store.

One AsyncConnectionPool per process, opened in the application lifespan.
Connections hand out dict rows in autocommit mode; every statement the
store issues is a single-row upsert, select or delete.
"""

import asyncio
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from meetsync.config import Settings
from meetsync.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

CLOSE_TIMEOUT_SECONDS = 10.0


class DatabasePoolManager:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.pool: AsyncConnectionPool | None = None
        self._state = "new"

    @property
    def initialized(self) -> bool:
        return self._state == "open"

    async def initialize(self) -> None:
        """
        Open the pool and run one round trip.

        Raises:
            RuntimeError: pool could not be opened or the round trip failed
        """
        if self._state == "open":
            logger.warning("Database pool already open")
            return
        if self._state == "closed":
            raise RuntimeError("Database pool was closed and cannot be reopened")

        pool_config = self.settings.get_db_pool_config()
        pool = AsyncConnectionPool(
            conninfo=self.settings.SUPABASE_DB_URL,
            open=False,
            check=AsyncConnectionPool.check_connection,
            configure=self._configure_connection,
            **pool_config,
        )
        try:
            await pool.open(wait=True, timeout=pool_config["timeout"])
            self.pool = pool
            self._state = "open"
            await self._ping()
        except Exception as e:
            self._state = "new"
            self.pool = None
            await pool.close()
            logger.error("Database pool failed to open", error=str(e), error_type=type(e).__name__)
            raise RuntimeError(f"Database pool initialization failed: {e}") from e

        logger.info(
            "Database pool open",
            min_size=pool_config["min_size"],
            max_size=pool_config["max_size"],
        )

    async def _configure_connection(self, conn: psycopg.AsyncConnection) -> None:
        conn.row_factory = dict_row
        await conn.set_autocommit(True)
        app_name = f"meetsync-{self.settings.environment}"
        await conn.execute(sql.SQL("SET application_name = {}").format(sql.Literal(app_name)))
        await conn.execute("SET timezone = 'UTC'")

    async def _ping(self) -> None:
        async with self.connection() as conn:
            cursor = await conn.execute("SELECT 1 AS ok")
            row = await cursor.fetchone()
        if not row or row["ok"] != 1:
            raise RuntimeError("Unexpected result from database ping")

    async def close(self) -> None:
        if self._state != "open":
            return
        self._state = "closed"
        try:
            await asyncio.wait_for(self.pool.close(), timeout=CLOSE_TIMEOUT_SECONDS)
            logger.info("Database pool closed")
        except TimeoutError:
            logger.warning("Database pool close timed out")

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        """Borrow a connection; RuntimeError when the pool is not open."""
        if self._state != "open":
            raise RuntimeError(f"Database pool is not open (state={self._state})")
        async with self.pool.connection() as conn:
            yield conn

    async def health_check(self) -> dict[str, Any]:
        if not self.initialized:
            return {"healthy": False, "service": "database_pool", "error": "Pool not open"}

        start_time = time.time()
        try:
            await self._ping()
        except Exception as e:
            return {"healthy": False, "service": "database_pool", "error": str(e)}

        stats = self.pool.get_stats()
        return {
            "healthy": True,
            "service": "database_pool",
            "connection_time_ms": round((time.time() - start_time) * 1000, 2),
            "pool_stats": {
                "pool_size": stats.get("pool_size", 0),
                "pool_available": stats.get("pool_available", 0),
                "requests_waiting": stats.get("requests_waiting", 0),
            },
        }
