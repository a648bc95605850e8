"""Application configuration from environment variables."""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Database
    database_url: str = "postgresql://reviewsite:reviewsite@db:5432/reviewsite"
    database_echo: bool = False

    # Popular reviews feed
    popular_reviews_window_hours: int = 24
    popular_reviews_limit: int = 10
    popular_reviews_max_limit: int = 50

    # Logging
    log_level: str = "info"
    log_path: str = ""

    class Config:
        env_file = (".env", "../.env")  # Check both backend/ and parent dir
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
