"""
Connection Domain Models
Rows owned by the durable store: users, provider connections, cached
meeting lists, AI summaries and analytics events.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ConnectionStatus = Literal["active", "revoked"]


class User(BaseModel):
    user_id: str
    name: str
    email: str
    entity_id: str | None = None
    created_at: datetime | None = None


class Connection(BaseModel):
    """One active connection per (user_id, app_name)."""

    user_id: str
    entity_id: str
    app_name: str = "googlecalendar"
    status: ConnectionStatus = "active"
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_active(self) -> bool:
        return self.status == "active"


class CacheEntry(BaseModel):
    user_id: str
    kind: str
    payload: list[dict[str, Any]] = Field(default_factory=list)
    cached_at: datetime

    def age_ms(self, now: datetime) -> float:
        return (now - self.cached_at).total_seconds() * 1000


class StoredSummary(BaseModel):
    """Created once per (meeting_id, user_id) and never regenerated."""

    meeting_id: str
    user_id: str
    text: str
    is_mock: bool = False
    created_at: datetime | None = None


class AnalyticsEvent(BaseModel):
    user_id: str
    event_type: str
    event_data: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
