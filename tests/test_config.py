"""Tests for configuration module."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from docchat.config import Settings, get_settings, reload_settings


class TestSettingsValidation:
    """Test configuration validation."""

    def test_defaults(self, monkeypatch):
        """Test that settings load with defaults."""
        monkeypatch.delenv("DOCCHAT_API_BASE_URL", raising=False)

        settings = Settings()

        assert settings.api_base_url == "http://localhost:5006/api"
        assert settings.request_timeout == 30.0
        assert settings.max_retries == 3
        assert settings.state_dir == Path("./data/state")
        assert settings.snapshot_key == "docchat-state"
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        """Test that prefixed environment variables are loaded."""
        monkeypatch.setenv("DOCCHAT_API_BASE_URL", "https://chat.example.com/api/")
        monkeypatch.setenv("DOCCHAT_MAX_RETRIES", "5")
        monkeypatch.setenv("DOCCHAT_STATE_DIR", "/tmp/docchat")

        settings = Settings()

        assert settings.api_base_url == "https://chat.example.com/api"
        assert settings.max_retries == 5
        assert settings.state_dir == Path("/tmp/docchat")

    def test_invalid_base_url(self, monkeypatch):
        """Test that a relative base URL is rejected."""
        monkeypatch.setenv("DOCCHAT_API_BASE_URL", "localhost:5006")

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        assert "api_base_url" in str(exc_info.value)

    def test_log_level_normalized(self, monkeypatch):
        """Test that log level is upper-cased."""
        monkeypatch.setenv("DOCCHAT_LOG_LEVEL", "debug")

        assert Settings().log_level == "DEBUG"

    def test_invalid_log_level(self, monkeypatch):
        """Test that unknown log levels are rejected."""
        monkeypatch.setenv("DOCCHAT_LOG_LEVEL", "LOUD")

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        assert "log_level" in str(exc_info.value)

    @pytest.mark.parametrize(
        "name,value",
        [
            ("DOCCHAT_MAX_RETRIES", "0"),
            ("DOCCHAT_REQUEST_TIMEOUT", "0"),
            ("DOCCHAT_RETRY_BACKOFF", "-1"),
            ("DOCCHAT_SNAPSHOT_KEY", ""),
        ],
    )
    def test_out_of_range_values(self, monkeypatch, name, value):
        """Test that out-of-range values fail fast."""
        monkeypatch.setenv(name, value)

        with pytest.raises(ValidationError):
            Settings()


def test_get_settings_is_cached_until_reload(monkeypatch):
    """Test global settings accessors."""
    first = reload_settings()

    assert get_settings() is first

    monkeypatch.setenv("DOCCHAT_MAX_RETRIES", "7")
    reloaded = reload_settings()

    assert reloaded is not first
    assert get_settings().max_retries == 7
    monkeypatch.delenv("DOCCHAT_MAX_RETRIES")
    reload_settings()
