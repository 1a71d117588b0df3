"""
Application settings and configuration management.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from tubescope import __version__

_HOUR = 60 * 60


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = Field(default="tubescope")
    app_version: str = Field(default=__version__)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Fetching
    pinned_hl: str = Field(default="en")
    pinned_gl: str = Field(default="US")
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_4) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36"
        )
    )
    accept_language: str = Field(default="en-US,en;q=0.9")
    request_timeout: float = Field(default=15.0)
    task_timeout: float = Field(default=30.0)
    max_concurrent_fetches: int = Field(default=6)
    default_collection_limit: int = Field(default=25)
    related_videos_limit: int = Field(default=20)

    # Supplementary fallbacks
    fetch_about_page: bool = Field(default=True)
    use_oembed_fallback: bool = Field(default=True)

    # Official API enrichment (optional)
    youtube_api_key: str = Field(default="")

    # Cache
    cache_enabled: bool = Field(default=True)
    cache_dir: Path = Field(default=Path("./cache"))
    cache_max_entries: int = Field(default=2048)
    ttl_channel_info: int = Field(default=12 * _HOUR)
    ttl_channel_videos: int = Field(default=6 * _HOUR)
    ttl_channel_search: int = Field(default=6 * _HOUR)
    ttl_video: int = Field(default=6 * _HOUR)
    ttl_video_search: int = Field(default=1 * _HOUR)
    ttl_playlist: int = Field(default=48 * _HOUR)
    ttl_related_videos: int = Field(default=1 * _HOUR)

    # Classification
    short_form_max_seconds: int = Field(default=60)

    @field_validator("cache_dir", mode="before")
    @classmethod
    def ensure_path(cls, v: str | Path) -> Path:
        """Ensure directory paths are Path objects."""
        if isinstance(v, str):
            return Path(v)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v.upper()

    @field_validator("max_concurrent_fetches", "cache_max_entries")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate that pool and cache sizes are positive."""
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @property
    def has_api_key(self) -> bool:
        """Whether the official API enrichment can be used."""
        return bool(self.youtube_api_key.strip())

    def create_directories(self) -> None:
        """Create the cache directory if it doesn't exist."""
        if self.cache_enabled:
            self.cache_dir.mkdir(parents=True, exist_ok=True)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()


# Global settings instance
settings = get_settings()
