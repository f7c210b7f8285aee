from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
    )

    PORT: int = 8000
    APP_NAME: str = "TongueScope"
    APP_ENV: Literal["development", "production", "test"] = "production"

    REDIS_URL: str = "redis://redis:6379/0"
    # Maximum number of connections the Redis client opens per process
    REDIS_MAX_CONNECTIONS: int = 20
    REDIS_KEY_PREFIX: str = "tonguescope:"

    # Remote tongue analysis API
    ANALYSIS_API_URL: str = "http://localhost:8001/"
    # Segmentation on the remote side is slow, keep generous timeouts
    ANALYSIS_API_TIMEOUT_SECONDS: float = 120.0
    ANALYSIS_API_MAX_RETRIES: int = 3


settings = Settings()
