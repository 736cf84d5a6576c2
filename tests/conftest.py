import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from meetsync.config import Settings
from meetsync.db.store import NullStore
from meetsync.models.domain.connection_domain import (
    AnalyticsEvent,
    CacheEntry,
    Connection,
    StoredSummary,
    User,
)
from meetsync.services.calendar.composio_client import AuthorizationRequest
from meetsync.services.container import ServiceContainer
from meetsync.services.errors import ProviderError
from meetsync.services.summary.openai_client import Completion

FIXED_NOW = datetime(2025, 6, 2, 8, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class InMemoryStore(NullStore):
    """Durable-store stand-in with the same upsert keys as the SQL tables."""

    enabled = True
    mode = "postgres"

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self.clock = clock or FakeClock()
        self.users: dict[str, User] = {}
        self.connections: dict[tuple[str, str], Connection] = {}
        self.cache_rows: dict[tuple[str, str], CacheEntry] = {}
        self.summaries: dict[tuple[str, str], StoredSummary] = {}
        self.events: list[AnalyticsEvent] = []

    async def upsert_user(self, user_id, name, email, entity_id=None):
        existing = self.users.get(user_id)
        if existing:
            existing.entity_id = entity_id
            return existing
        user = User(user_id=user_id, name=name, email=email, entity_id=entity_id)
        self.users[user_id] = user
        return user

    async def save_connection(self, user_id, entity_id, app_name, status="active", metadata=None):
        connection = Connection(
            user_id=user_id,
            entity_id=entity_id,
            app_name=app_name,
            status=status,
            metadata=metadata or {},
        )
        self.connections[(user_id, app_name)] = connection
        return connection

    async def get_connection(self, user_id, app_name):
        connection = self.connections.get((user_id, app_name))
        if connection and connection.is_active():
            return connection
        return None

    async def update_connection(self, user_id, app_name, *, status=None, metadata=None):
        connection = self.connections.get((user_id, app_name))
        if connection is None:
            return False
        if status is not None:
            connection.status = status
        if metadata is not None:
            connection.metadata = metadata
        return True

    async def cache_meetings(self, user_id, kind, payload):
        self.cache_rows[(user_id, kind)] = CacheEntry(
            user_id=user_id, kind=kind, payload=payload, cached_at=self.clock()
        )
        return True

    async def get_cache_entry(self, user_id, kind):
        return self.cache_rows.get((user_id, kind))

    async def delete_cached_meetings(self, user_id):
        keys = [key for key in self.cache_rows if key[0] == user_id]
        for key in keys:
            del self.cache_rows[key]
        return len(keys)

    async def save_summary(self, meeting_id, user_id, text, is_mock):
        key = (meeting_id, user_id)
        if key in self.summaries:
            return None
        summary = StoredSummary(meeting_id=meeting_id, user_id=user_id, text=text, is_mock=is_mock)
        self.summaries[key] = summary
        return summary

    async def get_summary(self, meeting_id, user_id):
        return self.summaries.get((meeting_id, user_id))

    async def log_event(self, user_id, event_type, event_data):
        self.events.append(
            AnalyticsEvent(user_id=user_id, event_type=event_type, event_data=event_data)
        )
        return True

    def event_types(self) -> list[str]:
        return [event.event_type for event in self.events]


class FakeProvider:
    """
    Calendar provider double. `responses` maps action -> response dict or
    exception; unknown actions raise a 404 ProviderError.
    """

    def __init__(self, responses: dict[str, Any] | None = None, delay: float = 0.0):
        self.responses = responses or {}
        self.delay = delay
        self.calls: list[tuple[str, str, dict]] = []
        self.entities: dict[str, Any] = {}
        self.closed = False

    async def execute_action(self, entity_id, action, params):
        self.calls.append((entity_id, action, params))
        if self.delay:
            await asyncio.sleep(self.delay)
        response = self.responses.get(action)
        if response is None:
            raise ProviderError.from_status(f"Action {action} not found", 404)
        if isinstance(response, Exception):
            raise response
        return response

    async def get_entity(self, entity_id):
        entity = self.entities.get(entity_id, {"entity_id": entity_id, "connections": []})
        if isinstance(entity, Exception):
            raise entity
        return entity

    async def initiate_connection(self, entity_id, redirect_url):
        return AuthorizationRequest(
            redirect_url=f"https://accounts.example.com/auth?redirect={redirect_url}",
            connection_id=f"conn-{entity_id}",
            status="INITIATED",
        )

    async def complete_connection(self, entity_id, code, connection_id):
        return {"id": connection_id, "status": "ACTIVE", "entityId": entity_id}

    def actions_called(self) -> list[str]:
        return [action for _, action, _ in self.calls]

    async def close(self):
        self.closed = True


class FakeLLM:
    def __init__(self, text: str = "A focused planning discussion.", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def complete(self, system_prompt, user_prompt, max_tokens=250, temperature=0.7):
        self.calls.append((system_prompt, user_prompt))
        if self.error:
            raise self.error
        return Completion(text=self.text, tokens_used=42)

    async def close(self):
        pass


class FakeChannel:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[dict] = []

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)


def calendar_event(
    event_id: str,
    summary: str | None,
    start: str,
    end: str,
    **extra,
) -> dict[str, Any]:
    event = {"id": event_id, "start": {"dateTime": start}, "end": {"dateTime": end}}
    if summary is not None:
        event["summary"] = summary
    event.update(extra)
    return event


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryStore(clock)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        COMPOSIO_API_KEY=None,
        OPENAI_API_KEY=None,
        SUPABASE_DB_URL=None,
    )


@pytest.fixture
def build_container(test_settings):
    def _build(store=None, provider=None, llm=None):
        return ServiceContainer(test_settings, store or NullStore(), provider=provider, llm=llm)

    return _build
