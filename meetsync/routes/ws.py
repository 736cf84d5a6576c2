"""
WebSocket push channel.

Client messages:  {"event": "identify", "data": "<userId>"}
                  {"event": "request_refresh"}
Server messages:  {"event": "<name>", "data": {...}}
"""

import json
import uuid
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from meetsync.infrastructure.observability.logging import get_logger
from meetsync.routes.dependencies import get_ws_services
from meetsync.services.container import ServiceContainer

logger = get_logger(__name__)

router = APIRouter()


class WebSocketChannel:
    """Push channel backed by one accepted WebSocket."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self.socket_id = uuid.uuid4().hex

    async def send_json(self, data: Any) -> None:
        if self.websocket.application_state != WebSocketState.CONNECTED:
            raise RuntimeError("WebSocket is not connected")
        await self.websocket.send_json(data)

    async def emit(self, event: str, data: dict[str, Any]) -> None:
        await self.send_json({"event": event, "data": data})


@router.websocket("/ws")
async def push_channel(
    websocket: WebSocket, services: ServiceContainer = Depends(get_ws_services)
):
    await websocket.accept()
    channel = WebSocketChannel(websocket)
    user_id: str | None = None
    logger.info("Client connected", socket_id=channel.socket_id)

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            raw = frame.get("text")
            if raw is None:
                logger.debug("Ignoring binary client frame", socket_id=channel.socket_id)
                continue
            try:
                message = json.loads(raw)
            except ValueError:
                logger.debug("Ignoring non-JSON client message", socket_id=channel.socket_id)
                continue
            if not isinstance(message, dict):
                continue
            event = message.get("event")

            if event == "identify" and message.get("data"):
                if user_id and user_id != message["data"]:
                    services.hub.unregister(user_id, channel)
                user_id = str(message["data"])
                services.hub.register(user_id, channel)
                await channel.emit("identified", {"userId": user_id, "socketId": channel.socket_id})

            elif event == "request_refresh":
                logger.info("Refresh requested", user_id=user_id)
                await channel.emit("refresh_meetings", {"timestamp": datetime.now(UTC).isoformat()})

            else:
                logger.debug("Ignoring unknown client event", push_event=event)

    except WebSocketDisconnect:
        logger.info("Client disconnected", socket_id=channel.socket_id, user_id=user_id)
    finally:
        if user_id:
            services.hub.unregister(user_id, channel)
