"""
Configuration management using Pydantic Settings.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from . import __build_time__, __version__


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="EVIDENCE_REPLAY_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Evidence Replay Engine"
    version: str = __version__
    build_time: str = __build_time__

    # Logging
    log_level: str = "WARNING"
    json_logs: bool = True

    # Report presentation
    detail_limit: int = 3  # Discrepancies shown in detail per check
    color: bool = True

    # Loader
    max_export_bytes: int = 512 * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
