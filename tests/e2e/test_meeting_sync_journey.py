"""
End-to-end: connect, fetch, cache, webhook invalidation, summary.
"""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from meetsync.main import app
from meetsync.models.domain.provider_domain import LIST_EVENTS
from tests.conftest import FakeLLM, FakeProvider, InMemoryStore, calendar_event


def _utcnow() -> datetime:
    return datetime.now(UTC)


@pytest.mark.asyncio
async def test_full_meeting_sync_journey(build_container):
    tomorrow = (_utcnow() + timedelta(days=1)).replace(hour=9, minute=0, second=0, microsecond=0)
    standup = calendar_event(
        "evt-standup",
        "Standup",
        tomorrow.isoformat(),
        (tomorrow + timedelta(minutes=30)).isoformat(),
        attendees=[{"email": "ana@example.com", "displayName": "Ana"}],
    )
    store = InMemoryStore(clock=_utcnow)
    provider = FakeProvider({LIST_EVENTS: {"data": {"items": [standup]}}})
    llm = FakeLLM(text="A short daily standup.")
    services = build_container(store=store, provider=provider, llm=llm)
    app.state.services = services
    client = TestClient(app)

    # 1. Not connected yet: 401 and nothing cached
    response = client.get("/api/meetings/upcoming", params={"userId": "u1"})
    assert response.status_code == 401
    assert store.cache_rows == {}
    assert provider.calls == []

    # 2. Bind the provider entity
    await services.resolver.bind_entity("u1", "E1")

    # 3. Live fetch
    first = client.get("/api/meetings/upcoming", params={"userId": "u1"}).json()
    assert first["cached"] is False
    [meeting] = first["meetings"]
    assert meeting["title"] == "Standup"
    assert meeting["attendees"][0]["name"] == "Ana"
    assert ("u1", "upcoming") in store.cache_rows
    assert provider.calls[0][0] == "E1"

    # 4. Second call within the TTL is served from the cache
    second = client.get("/api/meetings/upcoming", params={"userId": "u1"}).json()
    assert second["cached"] is True
    assert second["meetings"] == first["meetings"]
    assert len(provider.calls) == 1

    # 5. Provider webhook invalidates, next call refetches
    client.post("/api/webhook/calendar", json={"type": "event.updated", "userId": "u1"})
    third = client.get("/api/meetings/upcoming", params={"userId": "u1"}).json()
    assert third["cached"] is False
    assert len(provider.calls) == 2

    # 6. Summary is generated once
    for _ in range(2):
        summary = client.post(
            "/api/meetings/summarize", json={"userId": "u1", "meeting": meeting}
        ).json()
        assert summary["summary"] == "A short daily standup."
        assert summary["isMock"] is False
    assert len(llm.calls) == 1

    assert store.event_types() == [
        "meetings_fetched",
        "webhook_received",
        "meetings_fetched",
        "summary_generated",
    ]
