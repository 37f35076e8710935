"""Configuration settings for the application."""

from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Pydantic settings class for the application."""

    # Define the settings with default values and types
    # These will be loaded from environment variables or a .env file if not provided
    API_PORT: int = 8000
    PROXY_PORT: int = 8001
    DEBUG: bool = True
    LOG_LEVEL: str = "info"  # Options: debug, info, warning, error, critical
    WEBUI_ORIGINS: List[str] = ["http://localhost:8080"]

    # Completion client (talks to the proxy, never to Gemini directly)
    COMPLETION_PROXY_URL: str = "http://localhost:8001/"
    COMPLETION_ANON_KEY: str = ""
    COMPLETION_TIMEOUT: float = 30.0

    # Proxy -> upstream completion provider
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.5-flash-lite"
    GEMINI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"

    # Content store
    SUPABASE_URL: str | None = None
    SUPABASE_ANON_KEY: str | None = None

    # Assistant behaviour
    AGENT_MAX_ITERATIONS: int = 3
    FIND_BUSINESS_LIMIT: int = 5
    CHAT_MIN_INTERVAL_MS: int = 2000
    CHAT_RATE_LIMITED_INTERVAL_MS: int = 10000
    SEARCH_PAGE: str = "search.html"

    class Config:
        """Configuration for Pydantic settings."""

        # Load environment variables from a .env file
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
