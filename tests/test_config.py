"""
Unit tests for settings and logging setup.
"""

import logging

import pytest
from pydantic import ValidationError

from pitchtrainer.config import MissingConfigError, Settings
from pitchtrainer.logging_config import configure_logging


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, settings_without_key: Settings) -> None:
        """Test documented defaults."""
        assert settings_without_key.mistral_base_url == "https://api.mistral.ai/v1"
        assert settings_without_key.mistral_evaluation_model == "mistral-small-latest"
        assert settings_without_key.mistral_transcription_model == "voxtral-mini-latest"
        assert settings_without_key.upstream_max_retries == 0
        assert settings_without_key.port == 3000

    def test_base_url_trailing_slash_removed(self, test_settings: Settings) -> None:
        """Test the base URL is normalized."""
        assert test_settings.mistral_base_url == "https://test.api.local/v1"

    def test_max_file_size_bytes(self) -> None:
        """Test the upload limit in bytes."""
        assert Settings(max_file_size_mb=10).max_file_size_bytes == 10 * 1024 * 1024

    def test_log_level_upper_cased(self) -> None:
        """Test log levels are case-insensitive."""
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level(self) -> None:
        """Test unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    def test_retries_bounded(self) -> None:
        """Test retry count limits."""
        with pytest.raises(ValidationError):
            Settings(upstream_max_retries=10)

    def test_rate_limit(self) -> None:
        """Test the rate limit defaults to 100 requests per 15 minutes."""
        assert Settings().rate_limit == "100 per 900 seconds"
        assert (
            Settings(rate_limit_window_seconds=60, rate_limit_max_requests=5).rate_limit
            == "5 per 60 seconds"
        )

    def test_require_api_key(self, test_settings: Settings) -> None:
        """Test the configured key is returned."""
        assert test_settings.require_api_key("tests") == "test-api-key-for-testing"

    def test_require_missing_api_key(self, settings_without_key: Settings) -> None:
        """Test the error names the setting and its purpose."""
        with pytest.raises(MissingConfigError) as exc_info:
            settings_without_key.require_api_key("transcription")

        assert str(exc_info.value) == "MISTRAL_API_KEY is required for transcription"
        assert exc_info.value.setting_name == "mistral_api_key"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_single_handler(self) -> None:
        """Test repeated calls don't stack handlers."""
        configure_logging("INFO")
        configure_logging("DEBUG")

        logger = logging.getLogger("pitchtrainer")
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
