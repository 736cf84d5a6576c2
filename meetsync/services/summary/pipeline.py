"""
Summary pipeline: one summary per (meeting_id, user_id), generated once.

Lookup order: durable row, in-process cache, then generation. Without an
LLM, or when the LLM call fails, a synthetic summary is generated and
persisted in its place.
"""

from pydantic import BaseModel

from meetsync.db.store import NullStore
from meetsync.infrastructure.observability.logging import get_logger
from meetsync.models.domain.meeting_domain import Meeting
from meetsync.services.error_classifier import (
    ErrorClassification,
    classify_error,
    log_error_with_context,
)
from meetsync.services.summary.openai_client import OpenAILLMProvider
from meetsync.services.summary.prompts import SYSTEM_PROMPT, build_summary_prompt
from meetsync.services.synthetic.mock_data import generate_mock_summary

logger = get_logger(__name__)


class SummaryResult(BaseModel):
    summary: str
    is_mock: bool
    cached: bool = False
    tokens_used: int | None = None
    error: ErrorClassification | None = None
    message: str | None = None


class _CachedSummary(BaseModel):
    summary: str
    is_mock: bool


class SummaryPipeline:
    def __init__(
        self,
        store: NullStore,
        llm: OpenAILLMProvider | None = None,
        model: str = "gpt-4o-mini",
        max_tokens: int = 250,
        temperature: float = 0.7,
    ):
        self._store = store
        self._llm = llm
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._cache: dict[str, _CachedSummary] = {}

    @staticmethod
    def _key(user_id: str, meeting_id: str) -> str:
        return f"{user_id}:{meeting_id}"

    async def summarize(self, meeting: Meeting, user_id: str) -> SummaryResult:
        key = self._key(user_id, meeting.id)

        stored = await self._store.get_summary(meeting.id, user_id)
        if stored:
            logger.info("Summary served from store", user_id=user_id, meeting_id=meeting.id)
            return SummaryResult(summary=stored.text, is_mock=stored.is_mock, cached=True)

        cached = self._cache.get(key)
        if cached:
            logger.info("Summary served from memory", user_id=user_id, meeting_id=meeting.id)
            return SummaryResult(summary=cached.summary, is_mock=cached.is_mock, cached=True)

        if self._llm is None:
            summary = generate_mock_summary(meeting)
            await self._remember(meeting.id, user_id, summary, is_mock=True)
            await self._store.log_event(
                user_id, "summary_generated", {"meetingId": meeting.id, "type": "mock"}
            )
            return SummaryResult(summary=summary, is_mock=True)

        try:
            completion = await self._llm.complete(
                SYSTEM_PROMPT,
                build_summary_prompt(meeting),
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            classification = classify_error(e, source="summary", context="generate_summary")
            log_error_with_context(e, "generate_summary", user_id)

            summary = generate_mock_summary(meeting)
            await self._remember(meeting.id, user_id, summary, is_mock=True)
            return SummaryResult(
                summary=summary,
                is_mock=True,
                error=classification,
                message=classification.message,
            )

        await self._remember(meeting.id, user_id, completion.text, is_mock=False)
        await self._store.log_event(
            user_id,
            "summary_generated",
            {
                "meetingId": meeting.id,
                "type": "ai",
                "tokensUsed": completion.tokens_used,
                "model": self.model,
            },
        )

        logger.info(
            "Summary generated",
            user_id=user_id,
            meeting_id=meeting.id,
            tokens_used=completion.tokens_used,
        )
        return SummaryResult(
            summary=completion.text, is_mock=False, tokens_used=completion.tokens_used
        )

    async def _remember(self, meeting_id: str, user_id: str, text: str, is_mock: bool) -> None:
        await self._store.save_summary(meeting_id, user_id, text, is_mock)
        self._cache[self._key(user_id, meeting_id)] = _CachedSummary(summary=text, is_mock=is_mock)

    def reset(self) -> None:
        self._cache.clear()
