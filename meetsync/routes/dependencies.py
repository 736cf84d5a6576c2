"""FastAPI dependencies shared by the routers."""

from fastapi import Request, WebSocket

from meetsync.services.container import ServiceContainer


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_ws_services(websocket: WebSocket) -> ServiceContainer:
    return websocket.app.state.services
