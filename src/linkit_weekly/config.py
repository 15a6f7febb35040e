# ABOUTME: Centralized configuration using Pydantic Settings.
# ABOUTME: Loads all settings from environment variables and .env file.

from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # AI / Gemini
    gemini_api_key: SecretStr | None = None
    gemini_model: str = "gemini-1.5-flash"
    ai_sleep_between_calls: int = 0
    ai_temperature: float = 0.3
    ai_top_p: float = 0.8
    ai_max_output_tokens: int = 4000

    # Feeds
    feed_timeout: int = 10
    max_articles_per_feed: int = 50
    feed_user_agent: str = "Mozilla/5.0 (compatible; LinkitWeekly/1.0)"
    cors_proxies: list[str] = [
        "https://api.allorigins.win/raw?url=",
        "https://corsproxy.io/?",
    ]

    # Digest
    retention_days: int = 28

    # Newsletter
    reference_link: str | None = None  # Appended as footer to generated newsletters

    # Paths
    data_dir: Path = Path("data")
    digest_state_file: str = "weekly_digests.json"
    raw_articles_file: str = "raw_articles.json"
    archive_file: str = "newsletter_archive.json"
    sources_file: str = "rss_sources.json"

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "console" or "json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from environment variables and .env file.
    The Gemini API key is optional - only required for newsletter generation.
    """
    return Settings()
