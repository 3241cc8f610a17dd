"""Tests for Configuration Manager."""

import os
from unittest.mock import patch

import pytest

from recall.core.config import (
    DEFAULT_MODEL,
    Config,
    ConfigurationError,
    get_config,
    load_config,
    reset_config,
)


class TestConfigDefaults:
    """Test Config default values."""

    def test_config_has_correct_defaults(self):
        config = Config(gemini_api_key="test-key")

        assert config.model == DEFAULT_MODEL == "gemini-3-pro-preview"
        assert config.log_level == "INFO"


class TestConfigValidation:
    """Test Config validation."""

    def test_config_validates_log_level(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Config(gemini_api_key="test-key", log_level="INVALID")

        assert "Invalid LOG_LEVEL" in str(exc_info.value)

    def test_config_normalizes_log_level(self):
        assert Config(gemini_api_key="k", log_level="debug").log_level == "DEBUG"

    def test_config_rejects_blank_model(self):
        with pytest.raises(ConfigurationError):
            Config(gemini_api_key="k", model="   ")


class TestLoadConfig:
    """Test loading from environment variables."""

    def test_requires_api_key(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                load_config()

        assert "GEMINI_API_KEY" in str(exc_info.value)

    def test_api_key_optional_when_not_required(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_config(require_api_key=False)

        assert config.gemini_api_key == ""

    def test_reads_environment(self):
        env = {"GEMINI_API_KEY": "g-key", "RECALL_MODEL": "gemini-2.5-flash", "LOG_LEVEL": "warning"}
        with patch.dict(os.environ, env, clear=True):
            config = load_config()

        assert config.gemini_api_key == "g-key"
        assert config.model == "gemini-2.5-flash"
        assert config.log_level == "WARNING"

    def test_legacy_api_key_variable(self):
        with patch.dict(os.environ, {"API_KEY": "legacy"}, clear=True):
            assert load_config().gemini_api_key == "legacy"

    def test_gemini_key_preferred_over_legacy(self):
        with patch.dict(os.environ, {"API_KEY": "legacy", "GEMINI_API_KEY": "new"}, clear=True):
            assert load_config().gemini_api_key == "new"


class TestGetConfig:
    """Test the cached configuration."""

    def test_get_config_is_cached(self):
        with patch.dict(os.environ, {"GEMINI_API_KEY": "k"}, clear=True):
            assert get_config() is get_config()

    def test_reset_config_reloads(self):
        with patch.dict(os.environ, {"GEMINI_API_KEY": "first"}, clear=True):
            first = get_config()
        reset_config()
        with patch.dict(os.environ, {"GEMINI_API_KEY": "second"}, clear=True):
            second = get_config()

        assert first.gemini_api_key == "first"
        assert second.gemini_api_key == "second"
