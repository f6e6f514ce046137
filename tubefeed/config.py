"""Configuration management for the feed aggregator."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="YT_", extra="ignore")

    # Subscriptions
    subscriptions_file: Path = Path("subscriptions.yaml")

    # Feed settings
    feed_cache_ttl_seconds: int = Field(default=900, gt=0)  # 15 minutes
    cache_sweep_interval_seconds: int = Field(default=300, gt=0)  # 5 minutes
    fetch_timeout_seconds: float = Field(default=15.0, gt=0)

    # CORS
    frontend_origin: str = "http://localhost:5173"

    # Environment
    env: str = Field(default="dev", pattern="^(dev|prod)$")
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR)$")


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
