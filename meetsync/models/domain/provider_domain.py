"""
Provider Domain Models
Raw Composio/Google Calendar shapes, parsed as a tagged union keyed by the
action that produced them. Nothing in here leaves the calendar package:
the orchestrator normalizes to Meeting immediately.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

LIST_EVENTS = "GOOGLECALENDAR_LIST_EVENTS"
GET_EVENTS = "GOOGLECALENDAR_GET_EVENTS"
LIST_CALENDAR_EVENTS = "GOOGLECALENDAR_LIST_CALENDAR_EVENTS"
GET_CALENDAR_EVENTS = "GOOGLECALENDAR_GET_CALENDAR_EVENTS"

LIST_EVENT_ACTIONS = (LIST_EVENTS, GET_EVENTS, LIST_CALENDAR_EVENTS, GET_CALENDAR_EVENTS)

WATCH_EVENT_ACTIONS = (
    "GOOGLECALENDAR_EVENTS_WATCH",
    "GOOGLECALENDAR_WATCH_EVENTS",
    "GOOGLECALENDAR_SUBSCRIBE_EVENTS",
    "GOOGLECALENDAR_CREATE_WATCH",
)


class _RawModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RawEventTime(_RawModel):
    date_time: str | None = Field(None, alias="dateTime")
    date: str | None = None
    time_zone: str | None = Field(None, alias="timeZone")

    def value(self) -> str | None:
        return self.date_time or self.date


class RawAttendee(_RawModel):
    email: str | None = None
    display_name: str | None = Field(None, alias="displayName")
    response_status: str | None = Field(None, alias="responseStatus")


class RawOrganizer(_RawModel):
    email: str | None = None
    display_name: str | None = Field(None, alias="displayName")


class RawCalendarEvent(_RawModel):
    id: str
    summary: str | None = None
    description: str | None = None
    start: RawEventTime | None = None
    end: RawEventTime | None = None
    attendees: list[RawAttendee] = Field(default_factory=list)
    location: str | None = None
    hangout_link: str | None = Field(None, alias="hangoutLink")
    organizer: RawOrganizer | None = None


class _ItemsData(_RawModel):
    items: list[dict[str, Any]] = Field(default_factory=list)


class _ResponseData(_RawModel):
    response_data: _ItemsData = Field(default_factory=_ItemsData)


class _EventDataInner(_RawModel):
    event_data: list[dict[str, Any]] = Field(default_factory=list)


class _EventData(_RawModel):
    event_data: _EventDataInner = Field(default_factory=_EventDataInner)


class ListEventsResult(_RawModel):
    action: Literal["GOOGLECALENDAR_LIST_EVENTS"]
    data: _ItemsData = Field(default_factory=_ItemsData)

    def events(self) -> list[dict[str, Any]]:
        return self.data.items


class GetEventsResult(_RawModel):
    action: Literal["GOOGLECALENDAR_GET_EVENTS"]
    data: _ItemsData = Field(default_factory=_ItemsData)

    def events(self) -> list[dict[str, Any]]:
        return self.data.items


class ListCalendarEventsResult(_RawModel):
    action: Literal["GOOGLECALENDAR_LIST_CALENDAR_EVENTS"]
    data: _ResponseData = Field(default_factory=_ResponseData)

    def events(self) -> list[dict[str, Any]]:
        return self.data.response_data.items


class GetCalendarEventsResult(_RawModel):
    action: Literal["GOOGLECALENDAR_GET_CALENDAR_EVENTS"]
    data: _EventData = Field(default_factory=_EventData)

    def events(self) -> list[dict[str, Any]]:
        return self.data.event_data.event_data


CalendarEventsResult = Annotated[
    ListEventsResult | GetEventsResult | ListCalendarEventsResult | GetCalendarEventsResult,
    Field(discriminator="action"),
]

_events_adapter = TypeAdapter(CalendarEventsResult)


def parse_events_result(action: str, response: dict[str, Any]) -> CalendarEventsResult:
    """
    Validate a raw action response against the variant for `action`.

    Event items stay raw here; callers validate each one with RawCalendarEvent.
    """
    return _events_adapter.validate_python({"action": action, "data": response.get("data") or {}})
