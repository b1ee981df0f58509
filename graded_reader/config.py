"""
Configuration settings for the graded-reader review tools.

Uses Pydantic Settings for environment variable management with .env file support.
Variables are prefixed with ``GRADED_READER_`` (e.g. ``GRADED_READER_DB_PATH``).
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GRADED_READER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    db_path: Path = Field(
        default=Path.home() / ".graded_reader" / "state.db",
        description="SQLite file holding vocabulary, sessions and the review log",
    )

    # ========================================
    # Review Sessions
    # ========================================
    default_lang_id: str = Field(
        default="zh",
        description="Language used when a command is run without --lang",
    )
    new_cards_per_day: int = Field(
        default=20,
        ge=0,
        le=50,
        description="Never-reviewed cards (forward + reverse) introduced per day",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
