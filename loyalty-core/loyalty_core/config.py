"""
Resilience Configuration
========================
Settings for the resilience layer, read from the environment.
"""

from dataclasses import dataclass, field

from loyalty_core.circuit_breaker.models import CircuitBreakerConfig
from loyalty_core.env import env_str
from loyalty_core.exceptions import ConfigurationError
from loyalty_core.retry.models import RetryConfig

LOG_FORMATS = ("json", "console")


@dataclass(frozen=True)
class ResilienceSettings:
    """Process-wide defaults. Individual calls may still pass their own config."""
    service_name: str = "loyalty-service"
    log_level: str = "INFO"
    log_format: str = "json"
    retry: RetryConfig = field(default_factory=RetryConfig)
    breaker: CircuitBreakerConfig = field(default_factory=CircuitBreakerConfig)

    def __post_init__(self):
        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(
                f"log_format must be one of {LOG_FORMATS}, got {self.log_format!r}"
            )

    @classmethod
    def from_env(cls) -> "ResilienceSettings":
        """
        Load settings.

        Reads SERVICE_NAME, LOG_LEVEL, LOG_FORMAT, the RETRY_* variables and
        the CIRCUIT_* variables. Unset variables keep their defaults.
        """
        defaults = cls()
        return cls(
            service_name=env_str("SERVICE_NAME", defaults.service_name),
            log_level=env_str("LOG_LEVEL", defaults.log_level).upper(),
            log_format=env_str("LOG_FORMAT", defaults.log_format).lower(),
            retry=RetryConfig.from_env("RETRY_"),
            breaker=CircuitBreakerConfig.from_env("CIRCUIT_"),
        )
