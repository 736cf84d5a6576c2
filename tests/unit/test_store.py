"""
Tests for store degradation on database failures.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from meetsync.db.helpers import DatabaseError
from meetsync.db.store import NullStore, PostgresStore


@pytest.mark.asyncio
async def test_fetch_failure_reads_as_absent(monkeypatch):
    fetch_mock = AsyncMock(side_effect=DatabaseError("syntax", operation="fetch_one", recoverable=False))
    monkeypatch.setattr("meetsync.db.store.fetch_one", fetch_mock)
    store = PostgresStore(MagicMock())

    assert await store.get_connection("u1", "googlecalendar") is None
    assert fetch_mock.await_count == 1


@pytest.mark.asyncio
async def test_transient_failure_is_retried(monkeypatch):
    fetch_mock = AsyncMock(
        side_effect=[
            DatabaseError("timeout", operation="fetch_one", recoverable=True),
            {
                "user_id": "u1",
                "entity_id": "entity-1",
                "app_name": "googlecalendar",
                "status": "active",
                "metadata": {},
                "created_at": None,
                "updated_at": None,
            },
        ]
    )
    monkeypatch.setattr("meetsync.db.store.fetch_one", fetch_mock)
    monkeypatch.setattr("meetsync.db.helpers.asyncio.sleep", AsyncMock())
    store = PostgresStore(MagicMock())

    connection = await store.get_connection("u1", "googlecalendar")

    assert connection.entity_id == "entity-1"
    assert fetch_mock.await_count == 2


@pytest.mark.asyncio
async def test_execute_failure_returns_false(monkeypatch):
    execute_mock = AsyncMock(side_effect=DatabaseError("down", operation="execute", recoverable=True))
    monkeypatch.setattr("meetsync.db.store.execute_query", execute_mock)
    monkeypatch.setattr("meetsync.db.helpers.asyncio.sleep", AsyncMock())
    store = PostgresStore(MagicMock())

    assert await store.log_event("u1", "meetings_fetched", {"count": 1}) is False
    assert await store.delete_cached_meetings("u1") == 0
    # initial attempt + 2 retries, per call
    assert execute_mock.await_count == 6


@pytest.mark.asyncio
async def test_cache_entry_maps_row(monkeypatch):
    row = {
        "user_id": "u1",
        "meeting_type": "past",
        "meetings_data": [{"id": "e1", "title": "Sync"}],
        "cached_at": "2025-06-02T08:00:00+00:00",
    }
    monkeypatch.setattr("meetsync.db.store.fetch_one", AsyncMock(return_value=row))
    store = PostgresStore(MagicMock())

    entry = await store.get_cache_entry("u1", "past")

    assert entry.kind == "past"
    assert entry.payload[0]["title"] == "Sync"


@pytest.mark.asyncio
async def test_null_store_is_disabled():
    store = NullStore()

    assert store.enabled is False
    assert await store.get_summary("m1", "u1") is None
    assert await store.log_event("u1", "x", {}) is False
    assert (await store.health_check())["mode"] == "in_memory"
