"""
Calendar fetch orchestration.

    START -> CACHE_CHECK -> [CACHE_HIT]
                         -> RESOLVE_ENTITY -> [UNAUTHENTICATED]
                                           -> FETCH_CASCADE -> NORMALIZE -> CACHE_WRITE -> [SUCCESS]
                                                            -> SYNTHETIC_FALLBACK -> CACHE_WRITE -> [FALLBACK_SUCCESS]

Only UnauthenticatedUser escapes fetch_window. Every other failure is
classified and answered with synthetic meetings.
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from meetsync.db.store import NullStore
from meetsync.infrastructure.observability.logging import get_logger
from meetsync.models.domain.meeting_domain import Attendee, Meeting, MeetingKind, Organizer
from meetsync.models.domain.provider_domain import (
    LIST_EVENT_ACTIONS,
    RawCalendarEvent,
    parse_events_result,
)
from meetsync.services.cache.meetings_cache import MeetingsCache
from meetsync.services.calendar.cascade import run_cascade
from meetsync.services.calendar.composio_client import ComposioClient
from meetsync.services.error_classifier import (
    ErrorClassification,
    classify_error,
    log_error_with_context,
)
from meetsync.services.errors import ProviderCapabilityUnavailable, UnauthenticatedUser
from meetsync.services.identity.resolver import IdentityResolver
from meetsync.services.synthetic.mock_data import mock_meetings

logger = get_logger(__name__)

FALLBACK_MESSAGE = "Using mock data - calendar provider actions unavailable"


class FetchResult(BaseModel):
    meetings: list[Meeting] = Field(default_factory=list)
    cached: bool = False
    fallback: bool = False
    mock: bool = False
    error: ErrorClassification | None = None
    message: str | None = None


def _utcnow() -> datetime:
    return datetime.now(UTC)


def normalize_event(event: RawCalendarEvent) -> Meeting:
    organizer = None
    if event.organizer:
        organizer = Organizer(
            email=event.organizer.email,
            name=event.organizer.display_name or event.organizer.email,
        )

    return Meeting(
        id=event.id,
        title=event.summary or "No Title",
        start=event.start.value() if event.start else None,
        end=event.end.value() if event.end else None,
        description=event.description or "",
        attendees=[
            Attendee(
                email=attendee.email or "",
                name=attendee.display_name or attendee.email or "",
                response_status=attendee.response_status,
            )
            for attendee in event.attendees
        ],
        location=event.location or "",
        meet_link=event.hangout_link or "",
        organizer=organizer,
    )


def normalize_events(action: str, response: dict[str, Any], kind: MeetingKind) -> list[Meeting]:
    """Provider response -> canonical meetings; past lists come back most recent first."""
    result = parse_events_result(action, response)
    meetings = []
    for index, item in enumerate(result.events()):
        try:
            event = RawCalendarEvent.model_validate(item)
        except ValidationError as e:
            logger.warning(
                "Skipping malformed calendar event",
                action=action,
                index=index,
                event_id=item.get("id"),
                error_count=e.error_count(),
                error=str(e),
            )
            continue
        meetings.append(normalize_event(event))
    if kind == MeetingKind.PAST:
        meetings.reverse()
    return meetings


class CalendarFetchOrchestrator:
    def __init__(
        self,
        cache: MeetingsCache,
        resolver: IdentityResolver,
        store: NullStore,
        provider: ComposioClient | None = None,
        window_days: int = 30,
        max_results: int = 5,
        actions: tuple[str, ...] = LIST_EVENT_ACTIONS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._cache = cache
        self._resolver = resolver
        self._store = store
        self._provider = provider
        self.window_days = window_days
        self.max_results = max_results
        self.actions = actions
        self._clock = clock
        self._in_flight: dict[tuple[str, str], asyncio.Future] = {}

    def window(self, kind: MeetingKind, now: datetime) -> tuple[datetime, datetime]:
        span = timedelta(days=self.window_days)
        if kind == MeetingKind.PAST:
            return now - span, now
        return now, now + span

    async def fetch_window(self, user_id: str, kind: MeetingKind) -> FetchResult:
        """
        Meetings for the user's upcoming or past window.

        Raises:
            UnauthenticatedUser: no provider entity bound to the user
        """
        operation = f"fetch_{kind.value}_meetings"
        try:
            cached = await self._cache.get(user_id, kind)
            if cached is not None:
                return FetchResult(meetings=cached, cached=True)

            entity_id = await self._resolver.resolve_entity(user_id)
            if not entity_id:
                raise UnauthenticatedUser("Not connected to Google Calendar", user_id=user_id)

            return await self._single_flight(
                (user_id, kind.value),
                lambda: self._fetch_and_store(user_id, entity_id, kind),
            )

        except UnauthenticatedUser:
            raise
        except Exception as e:
            classification = classify_error(e, source="calendar", context=operation)
            log_error_with_context(e, operation, user_id)
            return FetchResult(
                meetings=mock_meetings(kind, self._clock()),
                mock=True,
                error=classification,
                message=classification.message,
            )

    async def _single_flight(
        self, key: tuple[str, str], factory: Callable[[], Awaitable[FetchResult]]
    ) -> FetchResult:
        """Concurrent misses for the same key share one upstream fetch."""
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._in_flight[key] = task

            def _clear(done: asyncio.Future) -> None:
                if self._in_flight.get(key) is done:
                    del self._in_flight[key]

            task.add_done_callback(_clear)
        else:
            logger.debug("Joining in-flight meetings fetch", user_id=key[0], kind=key[1])

        return await asyncio.shield(task)

    async def _fetch_and_store(
        self, user_id: str, entity_id: str, kind: MeetingKind
    ) -> FetchResult:
        now = self._clock()
        time_min, time_max = self.window(kind, now)
        params = {
            "timeMin": time_min.isoformat(),
            "timeMax": time_max.isoformat(),
            "maxResults": self.max_results,
            "orderBy": "startTime",
            "singleEvents": True,
        }

        fallback = False
        try:
            if self._provider is None:
                raise ProviderCapabilityUnavailable("Calendar provider not configured")
            outcome = await run_cascade(
                self._provider,
                entity_id,
                self.actions,
                params,
                operation=f"list_{kind.value}_events",
            )
        except ProviderCapabilityUnavailable as e:
            logger.warning(
                "All provider actions failed, falling back to mock data",
                user_id=user_id,
                kind=kind.value,
                error=str(e),
            )
            meetings = mock_meetings(kind, now)
            fallback = True
        else:
            meetings = normalize_events(outcome.action, outcome.response, kind)

        await self._cache.put(user_id, kind, meetings)
        await self._store.log_event(
            user_id,
            "meetings_fetched",
            {"type": kind.value, "count": len(meetings), "fallback": fallback},
        )

        logger.info(
            "Meetings fetched",
            user_id=user_id,
            kind=kind.value,
            count=len(meetings),
            fallback=fallback,
        )
        return FetchResult(
            meetings=meetings,
            fallback=fallback,
            message=FALLBACK_MESSAGE if fallback else None,
        )
