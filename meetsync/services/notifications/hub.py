"""
Per-user push channel registry and provider webhook handling.

One live channel per user, last registration wins. Delivery is best
effort: nothing is queued or retried for offline users.
"""

from datetime import UTC, datetime
from typing import Any, Protocol

from pydantic import BaseModel

from meetsync.db.store import NullStore
from meetsync.infrastructure.observability.logging import get_logger
from meetsync.services.cache.meetings_cache import MeetingsCache
from meetsync.services.identity.resolver import IdentityResolver

logger = get_logger(__name__)

CALENDAR_CHANGED_MESSAGE = "Your calendar has been updated. Refresh to see changes."
REVOCATION_EVENTS = {"connection.revoked"}


class PushChannel(Protocol):
    async def send_json(self, data: Any) -> None: ...


class WebhookOutcome(BaseModel):
    user_id: str | None = None
    event_type: str | None = None
    invalidated: int = 0
    revoked: bool = False
    notified: bool = False


def _event_user_id(event: dict[str, Any]) -> str | None:
    metadata = event.get("metadata") if isinstance(event.get("metadata"), dict) else {}
    return event.get("userId") or metadata.get("userId") or event.get("entity_id")


def _event_type(event: dict[str, Any]) -> str | None:
    return event.get("type") or event.get("eventType") or event.get("event_type")


class NotificationHub:
    def __init__(self, cache: MeetingsCache, resolver: IdentityResolver, store: NullStore):
        self._cache = cache
        self._resolver = resolver
        self._store = store
        self._channels: dict[str, PushChannel] = {}

    def register(self, user_id: str, channel: PushChannel) -> None:
        if user_id in self._channels and self._channels[user_id] is not channel:
            logger.info("Replacing push channel", user_id=user_id)
        self._channels[user_id] = channel
        logger.info("Push channel registered", user_id=user_id, connected=len(self._channels))

    def unregister(self, user_id: str, channel: PushChannel) -> None:
        """Remove the user's channel unless a newer one has replaced it."""
        if self._channels.get(user_id) is channel:
            del self._channels[user_id]
            logger.info("Push channel removed", user_id=user_id, connected=len(self._channels))

    def connected_users(self) -> list[str]:
        return sorted(self._channels)

    async def send(self, user_id: str, event: str, payload: dict[str, Any]) -> bool:
        """Deliver one message. False when the user has no channel or delivery fails."""
        channel = self._channels.get(user_id)
        if channel is None:
            logger.debug("No push channel for user", user_id=user_id, push_event=event)
            return False
        try:
            await channel.send_json({"event": event, "data": payload})
        except Exception as e:
            logger.warning("Push delivery failed", user_id=user_id, push_event=event, error=str(e))
            return False
        return True

    async def on_provider_webhook(self, event: dict[str, Any]) -> WebhookOutcome:
        """Invalidate the user's cached meetings and tell the client to refetch."""
        user_id = _event_user_id(event)
        event_type = _event_type(event)
        outcome = WebhookOutcome(user_id=user_id, event_type=event_type)

        logger.info("Calendar webhook received", user_id=user_id, event_type=event_type)

        if user_id:
            outcome.invalidated = await self._cache.invalidate(user_id)

            if event_type in REVOCATION_EVENTS:
                await self._resolver.revoke(user_id)
                outcome.revoked = True

            outcome.notified = await self.send(
                user_id,
                "calendar_changed",
                {
                    "eventType": event_type,
                    "message": CALENDAR_CHANGED_MESSAGE,
                    "timestamp": datetime.now(UTC).isoformat(),
                },
            )

        await self._store.log_event(
            user_id or "system", "webhook_received", {"eventType": event_type, "data": event}
        )
        return outcome

    def reset(self) -> None:
        self._channels.clear()
