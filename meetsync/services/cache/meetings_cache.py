"""
Tiered TTL cache for normalized meeting lists, keyed by (user_id, kind).

Durable tier (meetings_cache table) when the store is configured, otherwise
an in-process map. A process runs in exactly one mode; the tiers are never
reconciled. Staleness is lazy: expired rows stay in place and read as misses.
"""

from collections.abc import Callable
from datetime import UTC, datetime

from meetsync.db.store import NullStore
from meetsync.infrastructure.observability.logging import get_logger
from meetsync.models.domain.connection_domain import CacheEntry
from meetsync.models.domain.meeting_domain import (
    Meeting,
    MeetingKind,
    meetings_from_payload,
    meetings_to_payload,
)

logger = get_logger(__name__)

DEFAULT_TTL_MS = 300_000


def _utcnow() -> datetime:
    return datetime.now(UTC)


class MeetingsCache:
    def __init__(
        self,
        store: NullStore,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._store = store
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._entries: dict[tuple[str, str], CacheEntry] = {}

    @property
    def mode(self) -> str:
        return "durable" if self._store.enabled else "in_process"

    async def _read(self, user_id: str, kind: str) -> CacheEntry | None:
        if self._store.enabled:
            return await self._store.get_cache_entry(user_id, kind)
        return self._entries.get((user_id, kind))

    async def get(self, user_id: str, kind: MeetingKind) -> list[Meeting] | None:
        """Cached meetings, or None when absent or older than the TTL."""
        entry = await self._read(user_id, kind.value)
        if entry is None:
            return None

        age_ms = entry.age_ms(self._clock())
        if age_ms > self.ttl_ms:
            logger.debug(
                "Meetings cache stale",
                user_id=user_id,
                kind=kind.value,
                age_ms=round(age_ms),
                ttl_ms=self.ttl_ms,
            )
            return None

        logger.info("Meetings cache hit", user_id=user_id, kind=kind.value, mode=self.mode)
        return meetings_from_payload(entry.payload)

    async def put(self, user_id: str, kind: MeetingKind, meetings: list[Meeting]) -> None:
        """Upsert the list for (user_id, kind) and reset its age."""
        payload = meetings_to_payload(meetings)
        if self._store.enabled:
            await self._store.cache_meetings(user_id, kind.value, payload)
        else:
            self._entries[(user_id, kind.value)] = CacheEntry(
                user_id=user_id, kind=kind.value, payload=payload, cached_at=self._clock()
            )
        logger.debug("Meetings cached", user_id=user_id, kind=kind.value, count=len(meetings))

    async def invalidate(self, user_id: str) -> int:
        """Drop every cached list of the user. Returns the number of entries removed."""
        if self._store.enabled:
            removed = await self._store.delete_cached_meetings(user_id)
        else:
            keys = [key for key in self._entries if key[0] == user_id]
            for key in keys:
                del self._entries[key]
            removed = len(keys)

        logger.info("Meetings cache invalidated", user_id=user_id, removed=removed, mode=self.mode)
        return removed

    def reset(self) -> None:
        self._entries.clear()
