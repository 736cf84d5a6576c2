"""
Maps an application user to the calendar provider's entity id.

The durable connections table is authoritative; the in-process map covers
deployments without a database and is written on every bind.
"""

from typing import Any

from meetsync.db.store import NullStore
from meetsync.infrastructure.observability.logging import get_logger
from meetsync.models.domain.connection_domain import Connection

logger = get_logger(__name__)


class IdentityResolver:
    def __init__(self, store: NullStore, app_name: str = "googlecalendar"):
        self._store = store
        self.app_name = app_name
        self._entities: dict[str, str] = {}

    async def resolve_entity(self, user_id: str) -> str | None:
        """Entity id for the user, or None when the user has not connected yet."""
        connection = await self._store.get_connection(user_id, self.app_name)
        if connection:
            return connection.entity_id
        return self._entities.get(user_id)

    async def get_connection(self, user_id: str) -> Connection | None:
        connection = await self._store.get_connection(user_id, self.app_name)
        if connection:
            return connection
        entity_id = self._entities.get(user_id)
        if entity_id is None:
            return None
        return Connection(user_id=user_id, entity_id=entity_id, app_name=self.app_name)

    async def bind_entity(
        self,
        user_id: str,
        entity_id: str,
        user_data: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Idempotent upsert of the user and its active connection."""
        user_data = user_data or {}
        await self._store.upsert_user(
            user_id,
            name=user_data.get("name") or user_id,
            email=user_data.get("email") or f"{user_id}@example.com",
            entity_id=entity_id,
        )
        await self._store.save_connection(
            user_id, entity_id, self.app_name, status="active", metadata=metadata
        )

        previous = self._entities.get(user_id)
        self._entities[user_id] = entity_id
        if previous and previous != entity_id:
            logger.info("Entity rebound", user_id=user_id, previous=previous, entity_id=entity_id)
        else:
            logger.info("Entity bound", user_id=user_id, entity_id=entity_id)

    async def update_metadata(self, user_id: str, metadata: dict[str, Any]) -> bool:
        return await self._store.update_connection(user_id, self.app_name, metadata=metadata)

    def forget(self, user_id: str) -> None:
        """Drop the in-process binding only."""
        self._entities.pop(user_id, None)

    async def revoke(self, user_id: str) -> None:
        await self._store.update_connection(user_id, self.app_name, status="revoked")
        self.forget(user_id)
        logger.info("Connection revoked", user_id=user_id)

    def reset(self) -> None:
        self._entities.clear()
