"""
Tests for the calendar connection lifecycle.
"""

import pytest

from meetsync.models.domain.provider_domain import WATCH_EVENT_ACTIONS
from meetsync.services.calendar.connection_service import ConnectionService
from meetsync.services.errors import (
    ConnectionSessionMissing,
    ProviderError,
    ProviderNotConfigured,
    UnauthenticatedUser,
)
from meetsync.services.identity.resolver import IdentityResolver
from tests.conftest import FakeProvider


def _service(store, provider):
    resolver = IdentityResolver(store)
    service = ConnectionService(resolver, store, provider, frontend_url="http://localhost:5173/")
    return service, resolver


@pytest.mark.asyncio
async def test_status_for_unbound_user(store, provider):
    service, _ = _service(store, provider)

    status = await service.status("u1")

    assert status.connected is False
    assert status.entity_id is None


@pytest.mark.asyncio
async def test_status_for_bound_user(store, provider):
    service, resolver = _service(store, provider)
    await resolver.bind_entity("u1", "entity-1")

    status = await service.status("u1")

    assert status.connected is True
    assert status.entity_id == "entity-1"
    assert status.entity["entity_id"] == "entity-1"
    assert store.events[-1].event_type == "connection_status_check"


@pytest.mark.asyncio
async def test_status_when_provider_rejects_entity(store, provider):
    service, resolver = _service(store, provider)
    await resolver.bind_entity("u1", "entity-1")
    provider.entities["entity-1"] = ProviderError.from_status("gone", 404)

    status = await service.status("u1")

    assert status.connected is False


@pytest.mark.asyncio
async def test_status_requires_provider_for_bound_user(store):
    service, resolver = _service(store, None)
    await resolver.bind_entity("u1", "entity-1")

    with pytest.raises(ProviderNotConfigured):
        await service.status("u1")


@pytest.mark.asyncio
async def test_initiate_binds_entity(store, provider):
    service, resolver = _service(store, provider)

    entity_id, authorization = await service.initiate("u1")

    assert entity_id == "u1"
    assert authorization.connection_id == "conn-u1"
    assert "http://localhost:5173/oauth-callback?userId=u1" in authorization.redirect_url
    assert await resolver.resolve_entity("u1") == "u1"
    assert store.events[-1].event_data == {"entityId": "u1", "connectionId": "conn-u1"}


@pytest.mark.asyncio
async def test_initiate_without_provider(store):
    service, _ = _service(store, None)

    with pytest.raises(ProviderNotConfigured):
        await service.initiate("u1")


@pytest.mark.asyncio
async def test_complete_without_session(store, provider):
    service, _ = _service(store, provider)

    with pytest.raises(ConnectionSessionMissing):
        await service.complete("u1", "code-1", "conn-1")


@pytest.mark.asyncio
async def test_complete_records_connection_metadata(store, provider):
    service, _ = _service(store, provider)
    await service.initiate("u1")

    connection = await service.complete("u1", "code-1", "conn-u1")

    assert connection["status"] == "ACTIVE"
    metadata = store.connections[("u1", "googlecalendar")].metadata
    assert metadata["connectionId"] == "conn-u1"
    assert "completedAt" in metadata
    assert store.events[-1].event_type == "connection_completed"


@pytest.mark.asyncio
async def test_webhook_setup_requires_connection(store, provider):
    service, _ = _service(store, provider)

    with pytest.raises(UnauthenticatedUser):
        await service.setup_webhook("u1", "https://hooks.example.com/api/webhook/calendar")


@pytest.mark.asyncio
async def test_webhook_setup_falls_back_to_polling(store, provider):
    service, resolver = _service(store, provider)
    await resolver.bind_entity("u1", "entity-1")

    result = await service.setup_webhook("u1", "https://hooks.example.com/api/webhook/calendar")

    assert provider.actions_called() == list(WATCH_EVENT_ACTIONS)
    assert result.fallback == "websocket_polling"
    assert result.webhook is None
    assert store.events[-1].event_data["method"] == "websocket_polling"


@pytest.mark.asyncio
async def test_webhook_setup_with_watch_action(store):
    provider = FakeProvider({WATCH_EVENT_ACTIONS[1]: {"data": {"id": "channel-9"}}})
    service, resolver = _service(store, provider)
    await resolver.bind_entity("u1", "entity-1")

    result = await service.setup_webhook("u1", "https://hooks.example.com/api/webhook/calendar")

    assert result.webhook == {"id": "channel-9"}
    assert result.fallback is None
    assert result.message == "Live sync enabled via Composio webhooks"
    metadata = store.connections[("u1", "googlecalendar")].metadata
    assert metadata["webhookId"] == "channel-9"
    params = provider.calls[-1][2]
    assert params["metadata"] == {"userId": "u1"}
