"""
Application Configuration

This module provides type-safe configuration loading using Pydantic settings.
Environment variables are loaded from .env file and validated.

Timer and review defaults live here so that the settings store, the premium
policy and the HTTP layer agree on one set of fallbacks.

Usage:
    from studytimer.config import settings

    # Access settings
    db_url = settings.DATABASE_URL
    work_minutes = settings.DEFAULT_WORK_MINUTES
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # .env also holds test-only variables
    )

    # Application
    APP_NAME: str = "Study Timer"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # API
    # Empty API_KEY disables authentication (development mode)
    API_KEY: str = ""
    CORS_ORIGINS: list[str] = ["*"]

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./studytimer.db"
    DATABASE_ECHO: bool = False

    # Timer defaults (minutes)
    DEFAULT_WORK_MINUTES: int = 25
    DEFAULT_SHORT_BREAK_MINUTES: int = 5
    DEFAULT_LONG_BREAK_MINUTES: int = 15
    DEFAULT_CYCLES: int = 4

    # Timer bounds
    MIN_WORK_MINUTES: int = 1
    MAX_WORK_MINUTES: int = 120
    MIN_BREAK_MINUTES: int = 1
    MAX_BREAK_MINUTES: int = 60
    MIN_CYCLES: int = 1
    MAX_CYCLES: int = 10

    # Premium / trial
    TRIAL_DURATION_DAYS: int = 3

    # Statistics
    STREAK_MILESTONES: list[int] = [3, 7, 14, 30, 60, 100, 365]

    # Upcoming deadline window used by the "today" view (days)
    UPCOMING_DEADLINE_DAYS: int = 7

    # Longest date range a calendar count query may span (days)
    MAX_CALENDAR_RANGE_DAYS: int = 366

    # Pending change signals buffered per subscriber
    SUBSCRIPTION_QUEUE_SIZE: int = 1

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured database is SQLite."""
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()


@lru_cache()
def load_yaml_config() -> dict[str, Any]:
    """Load application configuration from config/default.yaml."""
    config_path = Path(__file__).parent.parent.parent / "config" / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


yaml_config: dict[str, Any] = load_yaml_config()
