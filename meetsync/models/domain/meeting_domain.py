"""
Meeting Domain Models
Canonical meeting shape shared by the fetch orchestrator, the cache and the
summary pipeline. Serialized with camelCase aliases for the dashboard client.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MeetingKind(str, Enum):
    """Which calendar window a meeting list covers."""

    UPCOMING = "upcoming"
    PAST = "past"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Attendee(_CamelModel):
    email: str = ""
    name: str = ""
    response_status: str | None = None


class Organizer(_CamelModel):
    email: str | None = None
    name: str | None = None


class Meeting(_CamelModel):
    """Normalized meeting. Always replaced wholesale, never patched."""

    id: str
    title: str = "No Title"
    start: str | None = None
    end: str | None = None
    description: str = ""
    attendees: list[Attendee] = Field(default_factory=list)
    location: str = ""
    meet_link: str = ""
    organizer: Organizer | None = None

    def start_datetime(self) -> datetime | None:
        return parse_timestamp(self.start)

    def end_datetime(self) -> datetime | None:
        return parse_timestamp(self.end)

    def to_payload(self) -> dict:
        """Wire/cache representation."""
        return self.model_dump(by_alias=True, mode="json")


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO timestamp or all-day date, assuming UTC when naive."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def meetings_to_payload(meetings: list[Meeting]) -> list[dict]:
    return [meeting.to_payload() for meeting in meetings]


def meetings_from_payload(payload: list[dict] | None) -> list[Meeting]:
    return [Meeting.model_validate(item) for item in payload or []]
