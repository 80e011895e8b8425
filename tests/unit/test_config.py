"""
Unit tests for configuration loading.
"""

from workflow_registry.config import Config, TestConfig


class TestConfigFromEnv:
    """Tests for Config.from_env."""

    def test_defaults(self, monkeypatch):
        for name in ("HOST", "PORT", "LOG_LEVEL", "API_PREFIX", "FLASK_DEBUG"):
            monkeypatch.delenv(name, raising=False)

        config = Config.from_env()

        assert config.HOST == "127.0.0.1"
        assert config.PORT == 5000
        assert config.API_PREFIX == "/api/v1"
        assert config.LOG_LEVEL == "INFO"
        assert config.FLASK_DEBUG is True

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        monkeypatch.setenv("FLASK_DEBUG", "false")
        monkeypatch.setenv("API_PREFIX", "/v2")

        config = Config.from_env()

        assert config.PORT == 8080
        assert config.LOG_LEVEL == "WARNING"
        assert config.FLASK_DEBUG is False
        assert config.API_PREFIX == "/v2"

    def test_test_config(self):
        config = TestConfig()

        assert config.FLASK_ENV == "testing"
        assert config.FLASK_DEBUG is False
