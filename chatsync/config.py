"""Engine configuration using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Backend binding
    BACKEND_API_URL: str = "http://127.0.0.1:8765"
    BACKEND_API_TOKEN: str = ""
    BACKEND_TIMEOUT_SECONDS: float = 30.0

    # Preference storage
    DATABASE_URL: str = "sqlite+aiosqlite:///./chatsync.db"

    # Polling
    POLL_INTERVAL_SECONDS: float = 2.0
    BACKGROUND_FETCH_LIMIT: int = 10
    CONVERSATION_FETCH_LIMIT: int = 100
    PREVIEW_FETCH_LIMIT: int = 1
    EXPORT_FETCH_LIMIT: int = 10000

    # Reserved inbound-only contact
    PUBLIC_CHANNEL_ID: str = "web_messages_contact"

    # Chat export
    EXPORT_DIR: str = "~/Downloads"

    # Telemetry
    OTEL_EXPORTER_OTLP_ENDPOINT: str = ""
    OTEL_SERVICE_NAME: str = "chatsync"

    # Debug mode
    DEBUG: bool = False


settings = Settings()
