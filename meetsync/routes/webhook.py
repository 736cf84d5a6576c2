"""
Calendar webhook routes: provider change notifications and subscription setup.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from meetsync.infrastructure.observability.logging import get_logger
from meetsync.models.api.connection_request import WebhookSetupRequest
from meetsync.models.api.connection_response import (
    WebhookReceivedResponse,
    WebhookSetupResponse,
)
from meetsync.routes.dependencies import get_services
from meetsync.services.container import ServiceContainer
from meetsync.services.errors import UnauthenticatedUser

logger = get_logger(__name__)

router = APIRouter(prefix="/api/webhook", tags=["webhook"])


@router.post("/calendar", response_model=WebhookReceivedResponse)
async def calendar_webhook(
    event: dict[str, Any] = Body(...),
    services: ServiceContainer = Depends(get_services),
):
    try:
        outcome = await services.hub.on_provider_webhook(event)
    except Exception as e:
        logger.error("Error processing webhook", error=str(e), error_type=type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process webhook",
        ) from e

    logger.info(
        "Webhook processed",
        user_id=outcome.user_id,
        invalidated=outcome.invalidated,
        notified=outcome.notified,
    )
    return WebhookReceivedResponse()


@router.post(
    "/setup",
    response_model=WebhookSetupResponse,
    response_model_exclude_none=True,
)
async def setup_webhook(
    request: Request,
    body: WebhookSetupRequest,
    services: ServiceContainer = Depends(get_services),
):
    user_id = body.user_id or services.settings.DEFAULT_USER_ID
    webhook_url = services.settings.webhook_callback_url(str(request.base_url))

    try:
        result = await services.connections.setup_webhook(user_id, webhook_url)
    except UnauthenticatedUser as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message) from e
    except Exception as e:
        logger.error("Error setting up webhook", user_id=user_id, error=str(e))
        return WebhookSetupResponse(
            fallback="websocket_polling",
            message="Live sync enabled via WebSocket polling",
        )

    return WebhookSetupResponse(**result.model_dump())
