from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"

# Values shipped in .env.example; treated the same as "not configured"
PLACEHOLDER_VALUES = {
    "your_composio_api_key_here",
    "your_openai_api_key_here",
    "your_supabase_url_here",
    "your_supabase_db_url_here",
}


def _is_set(value: str | None) -> bool:
    return bool(value) and value not in PLACEHOLDER_VALUES


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    FRONTEND_URL: str = "http://localhost:5173"
    WEBHOOK_URL: str | None = None
    DEFAULT_USER_ID: str = "default-user"

    # Composio (calendar provider) settings
    COMPOSIO_API_KEY: str | None = None
    COMPOSIO_BASE_URL: str = "https://backend.composio.dev/api"
    COMPOSIO_APP_NAME: str = "googlecalendar"
    COMPOSIO_TIMEOUT_SECONDS: float = 30.0

    # OpenAI settings
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_MAX_TOKENS: int = 250
    OPENAI_TEMPERATURE: float = 0.7
    OPENAI_TIMEOUT_SECONDS: float = 30.0
    OPENAI_MAX_RETRIES: int = 2

    # Supabase Postgres settings (optional: in-memory mode when missing)
    SUPABASE_DB_URL: str | None = None

    # Meetings
    MEETINGS_CACHE_TTL_MS: int = 300_000  # 5 minutes
    MEETINGS_WINDOW_DAYS: int = 30
    MEETINGS_MAX_RESULTS: int = 5

    # =================================================================
    # DATABASE POOL SETTINGS
    # =================================================================
    DB_POOL_MIN_SIZE: int = 2
    DB_POOL_MAX_SIZE: int = 10
    DB_POOL_TIMEOUT: float = 30.0
    DB_POOL_MAX_IDLE: float = 600.0  # 10 minutes
    DB_POOL_MAX_LIFETIME: float = 3600.0  # 1 hour

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def composio_configured(self) -> bool:
        return _is_set(self.COMPOSIO_API_KEY)

    def openai_configured(self) -> bool:
        return _is_set(self.OPENAI_API_KEY)

    def database_configured(self) -> bool:
        """Postgres is used only when a real connection string is present."""
        return _is_set(self.SUPABASE_DB_URL)

    def webhook_callback_url(self, request_base_url: str) -> str:
        """Public URL the provider should post calendar webhooks to."""
        base = self.WEBHOOK_URL or request_base_url
        return f"{base.rstrip('/')}/api/webhook/calendar"

    def get_db_pool_config(self) -> dict:
        """
        Get database pool configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "min_size": self.DB_POOL_MIN_SIZE,
            "max_size": self.DB_POOL_MAX_SIZE,
            "timeout": self.DB_POOL_TIMEOUT,
            "max_idle": self.DB_POOL_MAX_IDLE,
            "max_lifetime": self.DB_POOL_MAX_LIFETIME,
        }

        if self.environment == "development":
            config.update({"min_size": 1, "max_size": 4, "timeout": 15.0})

        return config


settings = Settings()
