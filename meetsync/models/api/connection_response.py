"""
Connection and webhook API response models.
Serialized with camelCase field names.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConnectionStatusResponse(_ApiModel):
    connected: bool
    entity_id: str | None = None
    entity: dict[str, Any] | None = None


class InitiateConnectionResponse(_ApiModel):
    connection_url: str = Field(..., description="Provider authorization URL")
    connection_id: str
    entity_id: str


class ConnectionCallbackResponse(_ApiModel):
    success: bool = True
    connection: dict[str, Any] | None = None
    message: str = "Successfully connected to Google Calendar"


class WebhookSetupResponse(_ApiModel):
    success: bool = True
    webhook: dict[str, Any] | None = None
    fallback: str | None = None
    message: str
    websocket_enabled: bool = True


class WebhookReceivedResponse(_ApiModel):
    success: bool = True
    message: str = "Webhook received and processed"
