"""
Calendar connection routes: status, OAuth initiation and callback.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from meetsync.infrastructure.observability.logging import get_logger
from meetsync.models.api.connection_request import (
    ConnectionCallbackRequest,
    InitiateConnectionRequest,
)
from meetsync.models.api.connection_response import (
    ConnectionCallbackResponse,
    ConnectionStatusResponse,
    InitiateConnectionResponse,
)
from meetsync.routes.dependencies import get_services
from meetsync.services.container import ServiceContainer
from meetsync.services.errors import ConnectionSessionMissing, ProviderNotConfigured

logger = get_logger(__name__)

router = APIRouter(prefix="/api/connection", tags=["connection"])


@router.get("/status", response_model=ConnectionStatusResponse)
async def connection_status(
    user_id: str | None = Query(None, alias="userId"),
    services: ServiceContainer = Depends(get_services),
):
    user_id = user_id or services.settings.DEFAULT_USER_ID
    try:
        result = await services.connections.status(user_id)
    except ProviderNotConfigured:
        return ConnectionStatusResponse(connected=False)
    except Exception as e:
        logger.error("Error checking connection status", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check connection status",
        ) from e

    return ConnectionStatusResponse(
        connected=result.connected, entity_id=result.entity_id, entity=result.entity
    )


@router.post("/initiate", response_model=InitiateConnectionResponse)
async def initiate_connection(
    request: InitiateConnectionRequest,
    services: ServiceContainer = Depends(get_services),
):
    user_id = request.user_id or services.settings.DEFAULT_USER_ID
    try:
        entity_id, authorization = await services.connections.initiate(user_id)
    except ProviderNotConfigured as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except Exception as e:
        logger.error("Error initiating connection", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to initiate Google Calendar connection: {e}",
        ) from e

    return InitiateConnectionResponse(
        connection_url=authorization.redirect_url,
        connection_id=authorization.connection_id,
        entity_id=entity_id,
    )


@router.post("/callback", response_model=ConnectionCallbackResponse)
async def connection_callback(
    request: ConnectionCallbackRequest,
    services: ServiceContainer = Depends(get_services),
):
    if not request.code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Authorization code is required"
        )

    user_id = request.user_id or services.settings.DEFAULT_USER_ID
    try:
        connection = await services.connections.complete(
            user_id, request.code, request.connection_id
        )
    except (ConnectionSessionMissing, ProviderNotConfigured) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except Exception as e:
        logger.error("Error completing connection", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to complete connection: {e}",
        ) from e

    return ConnectionCallbackResponse(connection=connection)
