"""Connection and webhook API request models."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InitiateConnectionRequest(_ApiModel):
    user_id: str | None = Field(None, description="Application user id")


class ConnectionCallbackRequest(_ApiModel):
    user_id: str | None = None
    code: str | None = Field(None, description="OAuth authorization code")
    connection_id: str | None = None


class WebhookSetupRequest(_ApiModel):
    user_id: str | None = None
