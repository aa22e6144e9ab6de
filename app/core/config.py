"""Application configuration."""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI
    openai_api_key: str
    openai_chat_model: str = "gpt-4o-mini"

    # Database
    database_url: str = "sqlite:///./aira.db"

    # Call tracking
    call_store_backend: str = "memory"  # memory, database
    default_intent: str = "general"
    retention_days: int = 730
    retention_mode: str = "none"  # none, exclude, delete

    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    cors_allow_origins: List[str] = ["*"]
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
