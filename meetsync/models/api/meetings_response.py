"""
Meetings API response models.
Serialized with camelCase field names.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from meetsync.models.domain.meeting_domain import Meeting


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MeetingsResponse(_ApiModel):
    """Response for the upcoming and past meetings endpoints."""

    meetings: list[Meeting] = Field(default_factory=list)
    cached: bool = Field(False, description="Served from the meetings cache")
    fallback: bool | None = Field(None, description="Provider actions exhausted, mock data served")
    mock: bool | None = Field(None, description="Unexpected failure, mock data served")
    error: dict[str, Any] | None = Field(None, description="Error classification")
    message: str | None = None


class SummaryResponse(_ApiModel):
    summary: str
    is_mock: bool
    cached: bool | None = None
    tokens_used: int | None = None
    error: dict[str, Any] | None = None
    message: str | None = None
