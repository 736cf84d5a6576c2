"""
Meetings API request models.
Used by routes for input validation.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from meetsync.models.domain.meeting_domain import Meeting


class SummarizeRequest(BaseModel):
    """Request body for POST /api/meetings/summarize."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    meeting: Meeting | None = Field(None, description="Meeting to summarize")
    user_id: str | None = Field(None, description="Application user id")
