"""
Service banner, liveness and integration status endpoints.
"""

import time
from datetime import UTC, datetime

from fastapi import APIRouter, Depends

from meetsync.routes.dependencies import get_services
from meetsync.services.container import ServiceContainer

router = APIRouter()


@router.get("/")
async def root(services: ServiceContainer = Depends(get_services)):
    return {
        "message": "Calendar Meeting Sync API",
        "status": "running",
        "frontend_url": services.settings.FRONTEND_URL,
        "endpoints": {
            "status": "/api/status",
            "connection_initiate": "/api/connection/initiate",
            "connection_callback": "/api/connection/callback",
            "connection_status": "/api/connection/status",
            "meetings_upcoming": "/api/meetings/upcoming",
            "meetings_past": "/api/meetings/past",
            "meetings_summarize": "/api/meetings/summarize",
            "webhook_setup": "/api/webhook/setup",
            "websocket": "/ws",
        },
    }


@router.get("/api/health")
async def health(services: ServiceContainer = Depends(get_services)):
    """Liveness: always 200 while the process is running."""
    t0 = time.time()
    store_health = await services.store.health_check()
    return {
        "status": "ok",
        "message": "Server is running",
        "store": {
            "mode": services.store.mode,
            "ok": store_health.get("healthy", False),
            "latency_ms": round((time.time() - t0) * 1000, 1),
        },
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/api/status")
async def system_status(services: ServiceContainer = Depends(get_services)):
    """Which integrations are live and which run on their fallback."""
    settings = services.settings
    composio_live = services.provider is not None
    openai_live = services.llm is not None
    store_live = services.store.enabled

    recommendations = []
    if not composio_live:
        recommendations.append("Get valid Composio API key for real calendar data")
    if not openai_live:
        recommendations.append("Add OpenAI credits for real AI summaries")
    if not store_live:
        recommendations.append("Configure Supabase for persistent data storage")

    return {
        "timestamp": datetime.now(UTC).isoformat(),
        "services": {
            "composio": {
                "configured": settings.composio_configured(),
                "status": "configured" if composio_live else "fallback_available",
                "message": (
                    "Calendar actions executed via Composio"
                    if composio_live
                    else "Using mock data fallback - get valid API key for real calendar data"
                ),
            },
            "openai": {
                "configured": settings.openai_configured(),
                "status": "configured" if openai_live else "fallback_available",
                "message": (
                    f"AI summaries generated with {settings.OPENAI_MODEL}"
                    if openai_live
                    else "Using mock summaries - add OpenAI credits for real AI summaries"
                ),
            },
            "supabase": {
                "configured": settings.database_configured(),
                "status": "connected" if store_live else "fallback_available",
                "message": "Database connected" if store_live else "Using in-memory storage",
            },
            "websocket": {
                "status": "active",
                "message": "Live sync enabled via WebSocket",
                "connected_users": len(services.hub.connected_users()),
            },
        },
        "fallbacks": {
            "meetings": "Mock data provides realistic meeting examples",
            "summaries": "Mock summaries provide realistic AI-generated content",
            "database": "In-memory storage works without external database",
        },
        "recommendations": recommendations,
    }
