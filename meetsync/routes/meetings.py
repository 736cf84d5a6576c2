"""
Meetings API Routes
Upcoming/past meeting windows and AI summaries. Provider and LLM failures
never surface here: the services answer with mock data instead.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from meetsync.models.api.meetings_request import SummarizeRequest
from meetsync.models.api.meetings_response import MeetingsResponse, SummaryResponse
from meetsync.models.domain.meeting_domain import MeetingKind
from meetsync.routes.dependencies import get_services
from meetsync.services.calendar.fetch_orchestrator import FetchResult
from meetsync.services.container import ServiceContainer
from meetsync.services.errors import UnauthenticatedUser

router = APIRouter(prefix="/api/meetings", tags=["meetings"])


def _meetings_response(result: FetchResult) -> MeetingsResponse:
    return MeetingsResponse(
        meetings=result.meetings,
        cached=result.cached,
        fallback=result.fallback or None,
        mock=result.mock or None,
        error=result.error.to_dict() if result.error else None,
        message=result.message,
    )


async def _fetch(services: ServiceContainer, user_id: str | None, kind: MeetingKind):
    user_id = user_id or services.settings.DEFAULT_USER_ID
    try:
        result = await services.meetings.fetch_window(user_id, kind)
    except UnauthenticatedUser as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message) from e
    return _meetings_response(result)


@router.get(
    "/upcoming",
    response_model=MeetingsResponse,
    response_model_exclude_none=True,
)
async def upcoming_meetings(
    user_id: str | None = Query(None, alias="userId"),
    services: ServiceContainer = Depends(get_services),
):
    """Meetings in the next 30 days, soonest first."""
    return await _fetch(services, user_id, MeetingKind.UPCOMING)


@router.get(
    "/past",
    response_model=MeetingsResponse,
    response_model_exclude_none=True,
)
async def past_meetings(
    user_id: str | None = Query(None, alias="userId"),
    services: ServiceContainer = Depends(get_services),
):
    """Meetings in the last 30 days, most recent first."""
    return await _fetch(services, user_id, MeetingKind.PAST)


@router.post(
    "/summarize",
    response_model=SummaryResponse,
    response_model_exclude_none=True,
)
async def summarize_meeting(
    request: SummarizeRequest,
    services: ServiceContainer = Depends(get_services),
):
    if request.meeting is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Meeting data is required"
        )

    user_id = request.user_id or services.settings.DEFAULT_USER_ID
    result = await services.summaries.summarize(request.meeting, user_id)
    return SummaryResponse(
        summary=result.summary,
        is_mock=result.is_mock,
        cached=result.cached or None,
        tokens_used=result.tokens_used,
        error=result.error.to_dict() if result.error else None,
        message=result.message,
    )
