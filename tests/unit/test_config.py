"""
Unit tests for configuration loading and validation.

These tests ensure:
  1. Config loads from environment variables correctly
  2. Required fields are validated at startup
  3. Type conversions work (e.g., strings to ints)
"""

import pytest
from unittest.mock import patch
from matchmaker.config import Config, validate_config


class TestConfigLoading:
    """Test configuration loading from environment."""

    @patch.dict("os.environ", {
        "STORE_BACKEND": "firestore",
        "FIREBASE_PROJECT_ID": "test-project",
    })
    def test_required_config_loads(self):
        """Store config should load from environment."""
        config = Config(_env_file=None)
        assert config.STORE_BACKEND == "firestore"
        assert config.FIREBASE_PROJECT_ID == "test-project"

    @patch.dict("os.environ", {
        "POPULARITY_THRESHOLD": "75",
        "MAX_PAGE_SIZE": "50",
    })
    def test_integer_config_conversion(self):
        """Integer environment variables should be converted to int."""
        config = Config(_env_file=None)
        assert config.POPULARITY_THRESHOLD == 75
        assert config.MAX_PAGE_SIZE == 50

    @patch.dict("os.environ", {"STORE_BACKEND": "cassandra"})
    def test_unknown_backend_rejected(self):
        with pytest.raises(ValueError):
            Config(_env_file=None)

    def test_optional_config_defaults(self):
        """Optional config should have sensible defaults."""
        config = Config(_env_file=None)
        assert config.PORT == 8000
        assert config.DEFAULT_PAGE_SIZE == 20
        assert config.NOTIFICATION_WEBHOOK_URL is None
        assert isinstance(config.DEBUG, bool)


def _valid_config(mock_config):
    mock_config.STORE_BACKEND = "firestore"
    mock_config.FIREBASE_PROJECT_ID = "test"
    mock_config.POPULARITY_THRESHOLD = 50
    mock_config.DEFAULT_PAGE_SIZE = 20
    mock_config.MAX_PAGE_SIZE = 100
    mock_config.NOTIFICATION_WEBHOOK_URL = None
    mock_config.ADMIN_EMAIL = None
    mock_config.LANGSMITH_ENABLED = False
    mock_config.LANGSMITH_API_KEY = None
    mock_config.SERVICE_TOKEN = ""


class TestConfigValidation:
    """Test configuration validation function."""

    @patch("matchmaker.config.config")
    def test_validate_firebase_required_for_firestore(self, mock_config):
        _valid_config(mock_config)
        mock_config.FIREBASE_PROJECT_ID = ""

        with pytest.raises(ValueError, match="FIREBASE_PROJECT_ID"):
            validate_config()

    @patch("matchmaker.config.config")
    def test_memory_backend_needs_no_firebase(self, mock_config):
        _valid_config(mock_config)
        mock_config.STORE_BACKEND = "memory"
        mock_config.FIREBASE_PROJECT_ID = None

        result = validate_config()
        assert result["store"] == "✓ memory"

    @patch("matchmaker.config.config")
    def test_default_page_size_within_max(self, mock_config):
        _valid_config(mock_config)
        mock_config.DEFAULT_PAGE_SIZE = 500

        with pytest.raises(ValueError, match="DEFAULT_PAGE_SIZE"):
            validate_config()

    @patch("matchmaker.config.config")
    def test_validate_langsmith_enabled_requires_key(self, mock_config):
        """LangSmith enabled requires API key."""
        _valid_config(mock_config)
        mock_config.LANGSMITH_ENABLED = True

        with pytest.raises(ValueError, match="LANGSMITH_ENABLED"):
            validate_config()

    @patch("matchmaker.config.config")
    def test_validate_success_returns_status(self, mock_config):
        """Successful validation should return status dict."""
        _valid_config(mock_config)
        mock_config.NOTIFICATION_WEBHOOK_URL = "https://mail.internal/send"

        result = validate_config()
        assert result["notifications"] == "✓ Webhook"
        assert "firebase" in result

    @patch("matchmaker.config.config")
    def test_open_deployment_reported(self, mock_config):
        """Without SERVICE_TOKEN any caller can pick X-User-Id; say so at startup."""
        _valid_config(mock_config)

        result = validate_config()
        assert result["service_token"] == "✗ Open (no SERVICE_TOKEN)"

    @patch("matchmaker.config.config")
    def test_service_token_reported(self, mock_config):
        _valid_config(mock_config)
        mock_config.SERVICE_TOKEN = "gateway-secret"

        result = validate_config()
        assert result["service_token"] == "✓ Required"
        assert "gateway-secret" not in str(result)
