"""Application configuration via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Notion OAuth
    notion_client_id: str = ""
    notion_client_secret: str = ""
    notion_redirect_uri: str = ""
    notion_version: str = "2022-06-28"
    notion_timeout_seconds: float = 30.0

    # Auth
    jwt_secret: str = ""
    jwt_ttl_hours: int = 24
    session_ttl_days: int = 30
    oauth_state_ttl_minutes: int = 10
    cookie_secure: bool = False

    # Storage
    database_url: str = "sqlite+aiosqlite:///./reddit_notion.db"

    # Reddit
    reddit_user_agent: str = "reddit-notion:v0.1.0"
    reddit_timeout_seconds: float = 10.0

    # App
    frontend_url: str = "http://localhost:5173"
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 8080


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings. Lazy initialization to avoid import-time errors."""
    return Settings()
