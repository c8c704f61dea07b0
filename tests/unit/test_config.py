"""
Unit tests for configuration management.

Tests the Settings class and YAML configuration loading.
"""

import os
from unittest.mock import patch

from studytimer.config import Settings, get_settings, load_yaml_config


class TestSettings:
    def test_default_values(self) -> None:
        """Settings should have sensible defaults when env vars are not set."""
        with patch.dict(os.environ, {}, clear=True):
            test_settings = Settings(_env_file=None)

            assert test_settings.APP_NAME == "Study Timer"
            assert test_settings.DATABASE_URL == "sqlite+aiosqlite:///./studytimer.db"
            assert test_settings.DEFAULT_WORK_MINUTES == 25
            assert test_settings.TRIAL_DURATION_DAYS == 3
            assert test_settings.API_KEY == ""

    def test_env_variable_override(self) -> None:
        """Environment variables should override default values."""
        env_overrides = {
            "APP_NAME": "Custom Timer",
            "DEBUG": "true",
            "DEFAULT_WORK_MINUTES": "50",
            "STREAK_MILESTONES": "[5, 10]",
        }
        with patch.dict(os.environ, env_overrides, clear=True):
            test_settings = Settings(_env_file=None)

            assert test_settings.APP_NAME == "Custom Timer"
            assert test_settings.DEBUG is True
            assert test_settings.DEFAULT_WORK_MINUTES == 50
            assert test_settings.STREAK_MILESTONES == [5, 10]

    def test_is_sqlite(self) -> None:
        assert Settings(_env_file=None, DATABASE_URL="sqlite+aiosqlite:///x.db").is_sqlite
        assert not Settings(
            _env_file=None, DATABASE_URL="postgresql+asyncpg://u:p@localhost/db"
        ).is_sqlite

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()


class TestYamlConfig:
    def test_default_yaml_has_pool_options(self) -> None:
        config = load_yaml_config()

        assert config["database"]["pool_size"] == 5
        assert "max_overflow" in config["database"]
