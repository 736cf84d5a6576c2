"""
FastAPI application: service container lifecycle, CORS and request logging.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from meetsync.config import settings
from meetsync.infrastructure.observability.logging import get_logger, log_request, setup_logging
from meetsync.routes import connection, health, meetings, webhook, ws
from meetsync.services.container import ServiceContainer

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the service container on startup and release its resources on shutdown."""
    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    services = ServiceContainer.from_settings(settings)
    await services.startup()
    app.state.services = services

    yield

    logger.info("Application shutting down")
    await services.shutdown()


app = FastAPI(
    title="Meeting Sync API",
    description="Calendar meetings with AI summaries and live sync",
    version="0.1.0",
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(connection.router)
app.include_router(meetings.router)
app.include_router(webhook.router)
app.include_router(ws.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
        user_id=request.query_params.get("userId"),
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
