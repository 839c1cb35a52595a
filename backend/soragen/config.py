"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """SoraGen application settings.

    Loaded from environment variables or .env file.
    """

    # --- Application ---
    APP_NAME: str = "SoraGen"
    DEBUG: bool = False
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # --- Remote generation API ---
    API_BASE_URL: str = "https://api.xlap.top"
    HTTP_TIMEOUT: float = 60.0
    NOTIFY_HOOK: str = ""

    # --- Polling ---
    POLL_INTERVAL: float = 10.0  # seconds between status ticks

    # --- Durable storage ---
    STORAGE_BACKEND: str = "redis"  # "redis" or "memory"
    REDIS_URL: str = "redis://localhost:6379/0"
    STORAGE_KEY_PREFIX: str = "soragen:"
    TASK_ID_KEY: str = "current_task_id"
    CREDENTIAL_KEY: str = "x_api_key"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton."""
    return Settings()
