"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    pexels_api_key: str
    pexels_base_url: str = "https://api.pexels.com"
    pexels_timeout_seconds: float = 30.0
    database_path: str = "photo_browser.db"
    search_page_size: int = 20
    search_debounce_seconds: float = 0.5
    search_history_limit: int = 10
    search_suggestion_limit: int = 5
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
