"""Tests for environment-driven configuration."""

import pytest
from pydantic import ValidationError

from smartreceipt.config import get_settings, validate_all_settings
from smartreceipt.config.settings import AppSettings
from smartreceipt.queries import MONDAY, SUNDAY


class TestAppSettings:
    """Tests for application settings."""

    def test_defaults(self):
        """Test the out-of-the-box values."""
        app = get_settings().app
        assert app.week_start_weekday == SUNDAY
        assert app.supported_mime_types == {"image/jpeg", "image/png", "image/webp"}
        assert app.max_upload_size_bytes == 10 * 1024 * 1024

    def test_week_start_from_env(self, monkeypatch):
        """Test that the week start can be changed."""
        monkeypatch.setenv("SMARTRECEIPT_WEEK_START", " Monday ")
        assert get_settings().app.week_start_weekday == MONDAY

    def test_unknown_week_start(self, monkeypatch):
        """Test that a misspelt weekday is rejected."""
        monkeypatch.setenv("SMARTRECEIPT_WEEK_START", "someday")
        with pytest.raises(ValidationError):
            AppSettings()


class TestValidateAllSettings:
    """Tests for the startup check."""

    def test_missing_api_key_reported(self):
        """Test that scanning shows as not configured."""
        status = validate_all_settings()
        assert status["gemini"] is False
        assert "GEMINI_API_KEY" in status["gemini_error"]
        assert status["storage"] is True
        assert status["app"] is True

    def test_api_key_present(self, monkeypatch):
        """Test that a key marks scanning as configured."""
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        assert validate_all_settings()["gemini"] is True
