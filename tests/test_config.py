"""Tests for configuration module."""

import json
import os
from unittest.mock import patch

from guest_bake.config import Settings, get_settings, print_settings_json


class TestSettings:
    """Test Settings class."""

    def test_default_settings(self) -> None:
        """Settings should have sensible defaults."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.cargo_command == "cargo"
        assert settings.builder_command == "r0-guest-builder"
        assert settings.log_level == "INFO"

    def test_settings_from_env(self) -> None:
        """Settings should be loadable from environment variables."""
        with patch.dict(
            os.environ,
            {
                "GUEST_BAKE_CARGO_COMMAND": "cargo +nightly",
                "GUEST_BAKE_BUILDER_COMMAND": "/opt/bin/builder",
                "GUEST_BAKE_LOG_LEVEL": "DEBUG",
            },
        ):
            settings = Settings()
            assert settings.cargo_command == "cargo +nightly"
            assert settings.builder_command == "/opt/bin/builder"
            assert settings.log_level == "DEBUG"


class TestGetSettings:
    """Test get_settings function."""

    def test_get_settings_returns_settings(self) -> None:
        """get_settings should return a Settings instance."""
        settings = get_settings()
        assert isinstance(settings, Settings)


class TestPrintSettingsJson:
    """Test print_settings_json function."""

    def test_print_settings_json(self) -> None:
        """print_settings_json should return valid JSON."""
        settings = Settings()
        parsed = json.loads(print_settings_json(settings))

        assert "cargo_command" in parsed
        assert "builder_command" in parsed
        assert "log_level" in parsed

    def test_print_settings_json_default(self) -> None:
        """print_settings_json without args should use default settings."""
        parsed = json.loads(print_settings_json())
        assert "cargo_command" in parsed
