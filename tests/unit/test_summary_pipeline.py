"""
Tests for the generate-once summary pipeline.
"""

import pytest

from meetsync.db.store import NullStore
from meetsync.models.domain.meeting_domain import Attendee, Meeting, Organizer
from meetsync.services.error_classifier import ErrorCategory
from meetsync.services.errors import LLMQuotaExceeded
from meetsync.services.summary.pipeline import SummaryPipeline
from meetsync.services.summary.prompts import SYSTEM_PROMPT, build_summary_prompt
from meetsync.services.synthetic.mock_data import generate_mock_summary
from tests.conftest import FakeLLM

MEETING = Meeting(
    id="m1",
    title="Q3 Planning",
    start="2025-06-02T14:00:00Z",
    end="2025-06-02T15:30:00Z",
    attendees=[Attendee(email=f"p{i}@example.com", name=f"Person {i}") for i in range(7)],
    location="Room 4",
    meet_link="https://meet.google.com/q3",
    description="x" * 350,
    organizer=Organizer(email="lead@example.com", name="Lead"),
)


@pytest.mark.asyncio
async def test_llm_called_once_per_meeting_and_user(store):
    llm = FakeLLM()
    pipeline = SummaryPipeline(store, llm=llm)

    first = await pipeline.summarize(MEETING, "u1")
    second = await pipeline.summarize(MEETING, "u1")

    assert len(llm.calls) == 1
    assert first.summary == second.summary == "A focused planning discussion."
    assert first.is_mock is False
    assert first.tokens_used == 42
    assert second.cached is True
    assert store.summaries[("m1", "u1")].is_mock is False


@pytest.mark.asyncio
async def test_summaries_are_per_user(store):
    llm = FakeLLM()
    pipeline = SummaryPipeline(store, llm=llm)

    await pipeline.summarize(MEETING, "u1")
    await pipeline.summarize(MEETING, "u2")

    assert len(llm.calls) == 2


@pytest.mark.asyncio
async def test_generate_once_survives_in_process_reset(store):
    llm = FakeLLM()
    pipeline = SummaryPipeline(store, llm=llm)

    await pipeline.summarize(MEETING, "u1")
    pipeline.reset()
    again = await pipeline.summarize(MEETING, "u1")

    assert len(llm.calls) == 1
    assert again.cached is True


@pytest.mark.asyncio
async def test_in_process_cache_without_store():
    llm = FakeLLM()
    pipeline = SummaryPipeline(NullStore(), llm=llm)

    await pipeline.summarize(MEETING, "u1")
    again = await pipeline.summarize(MEETING, "u1")

    assert len(llm.calls) == 1
    assert again.cached is True
    assert again.is_mock is False


@pytest.mark.asyncio
async def test_no_llm_uses_mock_and_persists(store):
    pipeline = SummaryPipeline(store)

    result = await pipeline.summarize(MEETING, "u1")

    assert result.is_mock is True
    assert result.summary == generate_mock_summary(MEETING)
    assert store.summaries[("m1", "u1")].is_mock is True
    assert store.events[-1].event_data == {"meetingId": "m1", "type": "mock"}


@pytest.mark.asyncio
async def test_llm_failure_falls_back_to_mock(store):
    llm = FakeLLM(error=LLMQuotaExceeded("quota", status_code=429, code="insufficient_quota"))
    pipeline = SummaryPipeline(store, llm=llm)

    result = await pipeline.summarize(MEETING, "u1")

    assert result.is_mock is True
    assert result.error.type == ErrorCategory.QUOTA_EXCEEDED
    assert result.message == "OpenAI quota exceeded - using realistic mock summary"
    assert store.summaries[("m1", "u1")].is_mock is True

    again = await pipeline.summarize(MEETING, "u1")
    assert len(llm.calls) == 1
    assert again.is_mock is True
    assert again.cached is True


@pytest.mark.asyncio
async def test_ai_summary_logs_analytics(store):
    pipeline = SummaryPipeline(store, llm=FakeLLM(), model="gpt-4o-mini")

    await pipeline.summarize(MEETING, "u1")

    event = store.events[-1]
    assert event.event_type == "summary_generated"
    assert event.event_data == {
        "meetingId": "m1",
        "type": "ai",
        "tokensUsed": 42,
        "model": "gpt-4o-mini",
    }


@pytest.mark.asyncio
async def test_prompt_sent_to_llm(store):
    llm = FakeLLM()
    pipeline = SummaryPipeline(store, llm=llm)

    await pipeline.summarize(MEETING, "u1")

    system_prompt, user_prompt = llm.calls[0]
    assert system_prompt == SYSTEM_PROMPT
    assert user_prompt == build_summary_prompt(MEETING)


def test_build_summary_prompt_contents():
    prompt = build_summary_prompt(MEETING)

    assert "**Meeting Title:** Q3 Planning" in prompt
    assert "**Date & Time:** Monday, June 2, 2025 at 2:00 PM (afternoon)" in prompt
    assert "**Duration:** 1h 30m" in prompt
    assert "**Attendees:** 7 participants" in prompt
    assert "  - Person 4" in prompt
    assert "  - Person 5" not in prompt
    assert "  - And 2 more..." in prompt
    assert "**Location:** Room 4" in prompt
    assert "**Format:** Virtual meeting (Google Meet)" in prompt
    assert f"**Description:** {'x' * 300}..." in prompt
    assert "**Organized by:** Lead" in prompt


def test_build_summary_prompt_minimal_meeting():
    prompt = build_summary_prompt(Meeting(id="m2", title="Chat"))

    assert "**Duration:** 0 minutes" in prompt
    assert "Attendees" not in prompt
    assert "Format" not in prompt
    assert "Date & Time" not in prompt


def test_build_summary_prompt_reports_time_in_utc():
    prompt = build_summary_prompt(
        Meeting(id="m3", title="Sync", start="2025-06-02T22:30:00-05:00", end="2025-06-02T23:00:00-05:00")
    )

    assert "**Date & Time:** Tuesday, June 3, 2025 at 3:30 AM (morning)" in prompt
