"""
Durable store for users, connections, meeting cache rows, AI summaries and
analytics events (Supabase Postgres).

Every call degrades to "absent" on failure: a store outage costs
functionality, never a request. Outages are logged with
outcome="store_unavailable" so they are not mistaken for empty results.
"""

from typing import Any

from psycopg.types.json import Jsonb

from meetsync.db.helpers import DatabaseError, execute_query, fetch_one, with_db_retry
from meetsync.db.pool import DatabasePoolManager
from meetsync.infrastructure.observability.logging import get_logger
from meetsync.models.domain.connection_domain import (
    CacheEntry,
    Connection,
    StoredSummary,
    User,
)

logger = get_logger(__name__)


class NullStore:
    """Store used when no database is configured: nothing persists."""

    enabled = False
    mode = "in_memory"

    async def upsert_user(
        self, user_id: str, name: str, email: str, entity_id: str | None = None
    ) -> User | None:
        return None

    async def save_connection(
        self,
        user_id: str,
        entity_id: str,
        app_name: str,
        status: str = "active",
        metadata: dict[str, Any] | None = None,
    ) -> Connection | None:
        return None

    async def get_connection(self, user_id: str, app_name: str) -> Connection | None:
        return None

    async def update_connection(
        self,
        user_id: str,
        app_name: str,
        *,
        status: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        return False

    async def cache_meetings(self, user_id: str, kind: str, payload: list[dict]) -> bool:
        return False

    async def get_cache_entry(self, user_id: str, kind: str) -> CacheEntry | None:
        return None

    async def delete_cached_meetings(self, user_id: str) -> int:
        return 0

    async def save_summary(
        self, meeting_id: str, user_id: str, text: str, is_mock: bool
    ) -> StoredSummary | None:
        return None

    async def get_summary(self, meeting_id: str, user_id: str) -> StoredSummary | None:
        return None

    async def log_event(self, user_id: str, event_type: str, event_data: dict[str, Any]) -> bool:
        return False

    async def health_check(self) -> dict[str, Any]:
        return {"healthy": True, "service": "store", "mode": self.mode}


class PostgresStore(NullStore):
    """CRUD against the Supabase tables through the shared connection pool."""

    enabled = True
    mode = "postgres"

    def __init__(self, pool: DatabasePoolManager):
        self.pool = pool

    @with_db_retry(max_retries=2, base_delay=0.1)
    async def _fetch(self, query: str, params: tuple) -> dict[str, Any] | None:
        return await fetch_one(self.pool, query, params)

    @with_db_retry(max_retries=2, base_delay=0.1)
    async def _execute(self, query: str, params: tuple) -> int:
        return await execute_query(self.pool, query, params)

    async def _safe_fetch(self, operation: str, query: str, params: tuple, **log_fields):
        try:
            row = await self._fetch(query, params)
        except DatabaseError as e:
            logger.error(
                "Store operation failed",
                operation=operation,
                outcome="store_unavailable",
                error=str(e),
                **log_fields,
            )
            return None
        if row is None:
            logger.debug("Store row not found", operation=operation, outcome="not_found", **log_fields)
        return row

    async def _safe_execute(self, operation: str, query: str, params: tuple, **log_fields) -> int:
        try:
            return await self._execute(query, params)
        except DatabaseError as e:
            logger.error(
                "Store operation failed",
                operation=operation,
                outcome="store_unavailable",
                error=str(e),
                **log_fields,
            )
            return 0

    # Users

    async def upsert_user(
        self, user_id: str, name: str, email: str, entity_id: str | None = None
    ) -> User | None:
        query = """
        INSERT INTO users (user_id, name, email, entity_id, created_at, updated_at)
        VALUES (%s, %s, %s, %s, NOW(), NOW())
        ON CONFLICT (user_id)
        DO UPDATE SET entity_id = EXCLUDED.entity_id, updated_at = NOW()
        RETURNING user_id, name, email, entity_id, created_at
        """
        row = await self._safe_fetch(
            "upsert_user", query, (user_id, name, email, entity_id), user_id=user_id
        )
        return User(**row) if row else None

    # Connections

    async def save_connection(
        self,
        user_id: str,
        entity_id: str,
        app_name: str,
        status: str = "active",
        metadata: dict[str, Any] | None = None,
    ) -> Connection | None:
        query = """
        INSERT INTO connections (
            user_id, entity_id, app_name, status, metadata, created_at, updated_at
        ) VALUES (%s, %s, %s, %s, %s, NOW(), NOW())
        ON CONFLICT (user_id, app_name)
        DO UPDATE SET
            entity_id = EXCLUDED.entity_id,
            status = EXCLUDED.status,
            metadata = EXCLUDED.metadata,
            updated_at = NOW()
        RETURNING user_id, entity_id, app_name, status, metadata, created_at, updated_at
        """
        row = await self._safe_fetch(
            "save_connection",
            query,
            (user_id, entity_id, app_name, status, Jsonb(metadata or {})),
            user_id=user_id,
        )
        return Connection(**row) if row else None

    async def get_connection(self, user_id: str, app_name: str) -> Connection | None:
        query = """
        SELECT user_id, entity_id, app_name, status, metadata, created_at, updated_at
        FROM connections
        WHERE user_id = %s AND app_name = %s AND status = 'active'
        """
        row = await self._safe_fetch("get_connection", query, (user_id, app_name), user_id=user_id)
        return Connection(**row) if row else None

    async def update_connection(
        self,
        user_id: str,
        app_name: str,
        *,
        status: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        query = """
        UPDATE connections
        SET
            status = COALESCE(%s, status),
            metadata = COALESCE(%s, metadata),
            updated_at = NOW()
        WHERE user_id = %s AND app_name = %s
        """
        metadata_param = Jsonb(metadata) if metadata is not None else None
        affected = await self._safe_execute(
            "update_connection",
            query,
            (status, metadata_param, user_id, app_name),
            user_id=user_id,
        )
        return affected > 0

    # Meetings cache

    async def cache_meetings(self, user_id: str, kind: str, payload: list[dict]) -> bool:
        query = """
        INSERT INTO meetings_cache (user_id, meeting_type, meetings_data, cached_at)
        VALUES (%s, %s, %s, NOW())
        ON CONFLICT (user_id, meeting_type)
        DO UPDATE SET meetings_data = EXCLUDED.meetings_data, cached_at = NOW()
        """
        affected = await self._safe_execute(
            "cache_meetings", query, (user_id, kind, Jsonb(payload)), user_id=user_id, kind=kind
        )
        return affected > 0

    async def get_cache_entry(self, user_id: str, kind: str) -> CacheEntry | None:
        query = """
        SELECT user_id, meeting_type, meetings_data, cached_at
        FROM meetings_cache
        WHERE user_id = %s AND meeting_type = %s
        """
        row = await self._safe_fetch(
            "get_cache_entry", query, (user_id, kind), user_id=user_id, kind=kind
        )
        if not row:
            return None
        return CacheEntry(
            user_id=row["user_id"],
            kind=row["meeting_type"],
            payload=row["meetings_data"] or [],
            cached_at=row["cached_at"],
        )

    async def delete_cached_meetings(self, user_id: str) -> int:
        return await self._safe_execute(
            "delete_cached_meetings",
            "DELETE FROM meetings_cache WHERE user_id = %s",
            (user_id,),
            user_id=user_id,
        )

    # AI summaries

    async def save_summary(
        self, meeting_id: str, user_id: str, text: str, is_mock: bool
    ) -> StoredSummary | None:
        query = """
        INSERT INTO ai_summaries (meeting_id, user_id, summary_text, is_mock, created_at)
        VALUES (%s, %s, %s, %s, NOW())
        ON CONFLICT (meeting_id, user_id) DO NOTHING
        RETURNING meeting_id, user_id, summary_text, is_mock, created_at
        """
        row = await self._safe_fetch(
            "save_summary", query, (meeting_id, user_id, text, is_mock), user_id=user_id
        )
        return _summary_from_row(row) if row else None

    async def get_summary(self, meeting_id: str, user_id: str) -> StoredSummary | None:
        query = """
        SELECT meeting_id, user_id, summary_text, is_mock, created_at
        FROM ai_summaries
        WHERE meeting_id = %s AND user_id = %s
        """
        row = await self._safe_fetch("get_summary", query, (meeting_id, user_id), user_id=user_id)
        return _summary_from_row(row) if row else None

    # Analytics

    async def log_event(self, user_id: str, event_type: str, event_data: dict[str, Any]) -> bool:
        query = """
        INSERT INTO analytics_events (user_id, event_type, event_data, created_at)
        VALUES (%s, %s, %s, NOW())
        """
        affected = await self._safe_execute(
            "log_event", query, (user_id, event_type, Jsonb(event_data)), user_id=user_id
        )
        return affected > 0

    async def health_check(self) -> dict[str, Any]:
        health = await self.pool.health_check()
        health["mode"] = self.mode
        return health


def _summary_from_row(row: dict[str, Any]) -> StoredSummary:
    return StoredSummary(
        meeting_id=row["meeting_id"],
        user_id=row["user_id"],
        text=row["summary_text"],
        is_mock=row["is_mock"],
        created_at=row.get("created_at"),
    )
