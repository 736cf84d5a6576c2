"""
Calendar connection lifecycle: status checks, the OAuth handshake with the
provider, and webhook subscription setup.

Unlike the meetings endpoints these operations fail loudly: a missing
provider key or a callback without a session is the caller's problem.
"""

from datetime import UTC, datetime
from typing import Any
from urllib.parse import urlencode

from pydantic import BaseModel

from meetsync.db.store import NullStore
from meetsync.infrastructure.observability.logging import get_logger
from meetsync.models.domain.provider_domain import WATCH_EVENT_ACTIONS
from meetsync.services.calendar.cascade import run_cascade
from meetsync.services.calendar.composio_client import AuthorizationRequest, ComposioClient
from meetsync.services.errors import (
    ConnectionSessionMissing,
    ProviderError,
    ProviderNotConfigured,
    UnauthenticatedUser,
)
from meetsync.services.identity.resolver import IdentityResolver

logger = get_logger(__name__)


class ConnectionStatus(BaseModel):
    connected: bool
    entity_id: str | None = None
    entity: dict[str, Any] | None = None


class WebhookSetupResult(BaseModel):
    success: bool = True
    webhook: dict[str, Any] | None = None
    fallback: str | None = None
    message: str
    websocket_enabled: bool = True


class ConnectionService:
    def __init__(
        self,
        resolver: IdentityResolver,
        store: NullStore,
        provider: ComposioClient | None,
        frontend_url: str,
    ):
        self._resolver = resolver
        self._store = store
        self._provider = provider
        self.frontend_url = frontend_url.rstrip("/")

    def _require_provider(self) -> ComposioClient:
        if self._provider is None:
            raise ProviderNotConfigured(
                "Composio API key not configured - set COMPOSIO_API_KEY to connect Google Calendar"
            )
        return self._provider

    async def status(self, user_id: str) -> ConnectionStatus:
        """Bound entity for the user, verified against the provider."""
        entity_id = await self._resolver.resolve_entity(user_id)
        if not entity_id:
            return ConnectionStatus(connected=False)

        provider = self._require_provider()
        try:
            entity = await provider.get_entity(entity_id)
        except ProviderError as e:
            logger.warning(
                "Stored entity rejected by provider", user_id=user_id, entity_id=entity_id, error=str(e)
            )
            self._resolver.forget(user_id)
            return ConnectionStatus(connected=False)

        await self._store.log_event(
            user_id, "connection_status_check", {"connected": True, "entityId": entity_id}
        )
        return ConnectionStatus(connected=True, entity_id=entity_id, entity=entity)

    async def initiate(self, user_id: str) -> tuple[str, AuthorizationRequest]:
        """Start the OAuth flow. Returns (entity_id, authorization request)."""
        provider = self._require_provider()
        entity_id = user_id

        query = urlencode({"userId": user_id})
        redirect_url = f"{self.frontend_url}/oauth-callback?{query}"

        authorization = await provider.initiate_connection(entity_id, redirect_url)
        await self._resolver.bind_entity(user_id, entity_id)
        await self._store.log_event(
            user_id,
            "connection_initiated",
            {"entityId": entity_id, "connectionId": authorization.connection_id},
        )

        logger.info(
            "Calendar connection initiated",
            user_id=user_id,
            connection_id=authorization.connection_id,
        )
        return entity_id, authorization

    async def complete(
        self, user_id: str, code: str, connection_id: str | None
    ) -> dict[str, Any]:
        entity_id = await self._resolver.resolve_entity(user_id)
        if not entity_id:
            raise ConnectionSessionMissing("No connection session found", user_id=user_id)

        provider = self._require_provider()
        connection = await provider.complete_connection(entity_id, code, connection_id)

        await self._resolver.bind_entity(
            user_id,
            entity_id,
            metadata={
                "connectionId": connection_id,
                "completedAt": datetime.now(UTC).isoformat(),
            },
        )
        await self._store.log_event(
            user_id, "connection_completed", {"entityId": entity_id, "connectionId": connection_id}
        )

        logger.info("Calendar connection completed", user_id=user_id, connection_id=connection_id)
        return connection

    async def setup_webhook(self, user_id: str, webhook_url: str) -> WebhookSetupResult:
        """
        Subscribe to calendar change webhooks. When no watch action is
        available the client keeps working through WebSocket refreshes.

        Raises:
            UnauthenticatedUser: no provider entity bound to the user
        """
        entity_id = await self._resolver.resolve_entity(user_id)
        if not entity_id:
            raise UnauthenticatedUser("Not connected to Google Calendar", user_id=user_id)

        webhook = None
        if self._provider is not None:
            try:
                outcome = await run_cascade(
                    self._provider,
                    entity_id,
                    WATCH_EVENT_ACTIONS,
                    {"webhookUrl": webhook_url, "metadata": {"userId": user_id}},
                    operation="watch_events",
                )
                webhook = outcome.response.get("data") or outcome.response
            except ProviderError as e:
                logger.info(
                    "Webhook actions unavailable, using WebSocket polling",
                    user_id=user_id,
                    error=str(e),
                )

        if webhook:
            await self._resolver.update_metadata(
                user_id,
                {
                    "webhookUrl": webhook_url,
                    "webhookId": webhook.get("id") or webhook.get("channelId"),
                    "webhookSetupAt": datetime.now(UTC).isoformat(),
                },
            )

        await self._store.log_event(
            user_id,
            "webhook_setup",
            {
                "success": webhook is not None,
                "webhookUrl": webhook_url,
                "method": "composio" if webhook else "websocket_polling",
            },
        )

        if webhook:
            return WebhookSetupResult(webhook=webhook, message="Live sync enabled via Composio webhooks")
        return WebhookSetupResult(
            fallback="websocket_polling",
            message="Live sync enabled via WebSocket polling (Composio webhooks unavailable)",
        )
