"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (unset = in-memory stores)
    database_url: str | None = None
    # Create tables at start-up instead of running Alembic (development only)
    auto_create_schema: bool = False

    # File storage
    upload_dir: str = "uploads"
    max_upload_bytes: int = 20 * 1024 * 1024

    # UI
    ui_origin: str = "http://localhost:8501"
    backend_url: str = "http://localhost:8000"

    # Reasoning provider
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"
    openai_max_tokens: int = 1000

    # Retry policy for transient provider overload
    provider_max_retries: int = 3
    provider_initial_delay_seconds: float = 2.0

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
