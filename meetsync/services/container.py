"""
Service container: every piece of process state in one explicit object.

Built once per application in the lifespan handler and stored on
app.state.services. Routes receive it through the get_services dependency.
"""

from meetsync.config import Settings
from meetsync.db.pool import DatabasePoolManager
from meetsync.db.store import NullStore, PostgresStore
from meetsync.infrastructure.observability.logging import get_logger
from meetsync.services.cache.meetings_cache import MeetingsCache
from meetsync.services.calendar.composio_client import ComposioClient
from meetsync.services.calendar.connection_service import ConnectionService
from meetsync.services.calendar.fetch_orchestrator import CalendarFetchOrchestrator
from meetsync.services.identity.resolver import IdentityResolver
from meetsync.services.notifications.hub import NotificationHub
from meetsync.services.summary.openai_client import OpenAILLMProvider
from meetsync.services.summary.pipeline import SummaryPipeline

logger = get_logger(__name__)


class ServiceContainer:
    def __init__(
        self,
        settings: Settings,
        store: NullStore,
        provider: ComposioClient | None = None,
        llm: OpenAILLMProvider | None = None,
        pool: DatabasePoolManager | None = None,
    ):
        self.settings = settings
        self.store = store
        self.provider = provider
        self.llm = llm
        self.pool = pool

        self.cache = MeetingsCache(store, ttl_ms=settings.MEETINGS_CACHE_TTL_MS)
        self.resolver = IdentityResolver(store, app_name=settings.COMPOSIO_APP_NAME)
        self.meetings = CalendarFetchOrchestrator(
            self.cache,
            self.resolver,
            store,
            provider=provider,
            window_days=settings.MEETINGS_WINDOW_DAYS,
            max_results=settings.MEETINGS_MAX_RESULTS,
        )
        self.connections = ConnectionService(
            self.resolver, store, provider, frontend_url=settings.FRONTEND_URL
        )
        self.summaries = SummaryPipeline(
            store,
            llm=llm,
            model=settings.OPENAI_MODEL,
            max_tokens=settings.OPENAI_MAX_TOKENS,
            temperature=settings.OPENAI_TEMPERATURE,
        )
        self.hub = NotificationHub(self.cache, self.resolver, store)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceContainer":
        """Wire the configured integrations; anything missing runs in fallback mode."""
        pool = None
        store: NullStore = NullStore()
        if settings.database_configured():
            pool = DatabasePoolManager(settings)
            store = PostgresStore(pool)
        else:
            logger.warning("SUPABASE_DB_URL not configured - running in in-memory mode")

        provider = None
        if settings.composio_configured():
            provider = ComposioClient.from_settings(settings)
        else:
            logger.warning("COMPOSIO_API_KEY not configured - calendar uses mock data")

        llm = None
        if settings.openai_configured():
            llm = OpenAILLMProvider.from_settings(settings)
        else:
            logger.warning("OPENAI_API_KEY not configured - summaries use mock generator")

        return cls(settings, store, provider=provider, llm=llm, pool=pool)

    async def startup(self) -> list[str]:
        """Open external resources. A failed pool leaves the store reading as empty."""
        started = []
        if self.pool is not None:
            try:
                await self.pool.initialize()
                started.append("database_pool")
            except Exception as e:
                logger.error(
                    "Database pool unavailable, store calls will degrade",
                    error=str(e),
                    error_type=type(e).__name__,
                )
        logger.info("Services started", services=started, store_mode=self.store.mode)
        return started

    async def shutdown(self) -> None:
        errors = []
        for name, resource in (
            ("composio", self.provider),
            ("openai", self.llm),
            ("database_pool", self.pool),
        ):
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as e:
                logger.error("Error closing service", service=name, error=str(e))
                errors.append(f"{name}: {e}")

        if errors:
            logger.warning("Some services had shutdown errors", errors=errors)
        else:
            logger.info("All services closed successfully")

    def reset(self) -> None:
        """Clear in-process state (caches, bindings, channels)."""
        self.cache.reset()
        self.resolver.reset()
        self.summaries.reset()
        self.hub.reset()
