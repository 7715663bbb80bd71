"""
Unit Tests for Configuration and Logging Setup
==============================================
"""

import json

import pytest
import structlog

from loyalty_core.circuit_breaker import CircuitBreakerConfig
from loyalty_core.config import ResilienceSettings
from loyalty_core.exceptions import ConfigurationError
from loyalty_core.log_config import configure_from_settings, configure_logging
from loyalty_core.retry import RetryConfig


class TestRetryConfig:

    def test_defaults(self):
        config = RetryConfig()

        assert config.max_attempts == 3
        assert config.initial_delay_ms == 1000
        assert config.max_delay_ms == 10000
        assert config.backoff_factor == 2
        assert config.jitter is True

    @pytest.mark.parametrize(
        "overrides",
        [
            {"max_attempts": 0},
            {"initial_delay_ms": -1},
            {"initial_delay_ms": 500, "max_delay_ms": 100},
            {"backoff_factor": 0.5},
        ],
    )
    def test_invalid_values(self, overrides):
        """Should reject out-of-range settings at construction."""
        with pytest.raises(ConfigurationError):
            RetryConfig(**overrides)

    def test_with_overrides(self):
        config = RetryConfig().with_overrides(max_attempts=5, jitter=False)

        assert config.max_attempts == 5
        assert config.jitter is False
        assert RetryConfig().max_attempts == 3

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("WALLET_RETRY_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("WALLET_RETRY_INITIAL_DELAY_MS", "250")
        monkeypatch.setenv("WALLET_RETRY_JITTER", "false")

        config = RetryConfig.from_env("WALLET_RETRY_")

        assert config.max_attempts == 5
        assert config.initial_delay_ms == 250
        assert config.jitter is False
        assert config.max_delay_ms == 10000

    def test_from_env_rejects_garbage(self, monkeypatch):
        monkeypatch.setenv("RETRY_MAX_ATTEMPTS", "three")

        with pytest.raises(ConfigurationError, match="RETRY_MAX_ATTEMPTS"):
            RetryConfig.from_env()

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            RetryConfig(max_attempts=-1)


class TestResilienceSettings:

    def test_from_env(self, monkeypatch):
        """Should read service, logging, retry and breaker settings."""
        monkeypatch.setenv("SERVICE_NAME", "loyalty-api")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_FORMAT", "Console")
        monkeypatch.setenv("CIRCUIT_FAILURE_THRESHOLD", "7")
        monkeypatch.setenv("CIRCUIT_RESET_TIMEOUT_MS", "15000")
        monkeypatch.setenv("RETRY_BACKOFF_FACTOR", "3")

        settings = ResilienceSettings.from_env()

        assert settings.service_name == "loyalty-api"
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "console"
        assert settings.breaker == CircuitBreakerConfig(failure_threshold=7, reset_timeout_ms=15000)
        assert settings.retry.backoff_factor == 3

    def test_invalid_log_format(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "xml")

        with pytest.raises(ConfigurationError):
            ResilienceSettings.from_env()

    def test_invalid_boolean(self, monkeypatch):
        monkeypatch.setenv("RETRY_JITTER", "sometimes")

        with pytest.raises(ConfigurationError):
            ResilienceSettings.from_env()


class TestConfigureLogging:

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        structlog.reset_defaults()
        structlog.contextvars.clear_contextvars()

    def test_json_output(self, capsys):
        """Should render JSON lines carrying the service name."""
        configure_logging(service_name="loyalty-api", level="INFO", log_format="json")

        structlog.get_logger("test").info("circuit_opened", breaker="wallet", failures=5)
        structlog.get_logger("test").debug("retry_attempt")

        lines = [line for line in capsys.readouterr().out.splitlines() if line]
        assert len(lines) == 1

        event = json.loads(lines[0])
        assert event["event"] == "circuit_opened"
        assert event["service"] == "loyalty-api"
        assert event["breaker"] == "wallet"
        assert event["level"] == "info"
        assert event["failures"] == 5

    def test_invalid_level(self):
        with pytest.raises(ConfigurationError):
            configure_logging(level="LOUD")

    def test_invalid_format(self):
        with pytest.raises(ConfigurationError):
            configure_logging(log_format="xml")

    def test_configure_from_settings(self, capsys):
        """Should apply the service name, level and format from settings."""
        settings = ResilienceSettings(service_name="points-ledger", log_level="WARNING", log_format="json")
        configure_from_settings(settings)

        structlog.get_logger("test").info("retry_succeeded")
        structlog.get_logger("test").warning("retry_attempt_failed", attempt=1)

        lines = [line for line in capsys.readouterr().out.splitlines() if line]
        assert len(lines) == 1

        event = json.loads(lines[0])
        assert event["event"] == "retry_attempt_failed"
        assert event["service"] == "points-ledger"

    def test_configure_from_env(self, monkeypatch, capsys):
        monkeypatch.setenv("SERVICE_NAME", "loyalty-api")
        monkeypatch.setenv("LOG_LEVEL", "error")
        configure_from_settings()

        structlog.get_logger("test").warning("retry_delay")
        structlog.get_logger("test").error("retry_exhausted")

        lines = [line for line in capsys.readouterr().out.splitlines() if line]
        assert [json.loads(line)["event"] for line in lines] == ["retry_exhausted"]
