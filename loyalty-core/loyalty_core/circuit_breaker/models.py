"""
Circuit Breaker Models
======================
Data models and enums for the circuit breaker pattern.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Type

from loyalty_core.env import env_float, env_int
from loyalty_core.exceptions import ConfigurationError


class CircuitState(str, Enum):
    """Circuit breaker states."""
    CLOSED = "closed"        # Normal operation
    OPEN = "open"            # Failing, reject requests
    HALF_OPEN = "half_open"  # Testing recovery


@dataclass(frozen=True)
class CircuitBreakerConfig:
    """Configuration for a circuit breaker. Durations are in milliseconds."""
    failure_threshold: int = 5             # Failures before opening
    reset_timeout_ms: float = 60000.0      # Time to stay open before a probe
    monitoring_window_ms: float = 300000.0  # Failures older than this are forgotten
    success_threshold: int = 2             # Probe successes to close from half-open
    excluded_exceptions: Tuple[Type[BaseException], ...] = ()  # Not counted as failures

    def __post_init__(self):
        if self.failure_threshold < 1:
            raise ConfigurationError("failure_threshold must be at least 1")
        if self.success_threshold < 1:
            raise ConfigurationError("success_threshold must be at least 1")
        if self.reset_timeout_ms < 0:
            raise ConfigurationError("reset_timeout_ms must not be negative")
        if self.monitoring_window_ms < 0:
            raise ConfigurationError("monitoring_window_ms must not be negative")

    @classmethod
    def from_env(cls, prefix: str = "CIRCUIT_") -> "CircuitBreakerConfig":
        defaults = cls()
        return cls(
            failure_threshold=env_int(
                f"{prefix}FAILURE_THRESHOLD", defaults.failure_threshold
            ),
            reset_timeout_ms=env_float(
                f"{prefix}RESET_TIMEOUT_MS", defaults.reset_timeout_ms
            ),
            monitoring_window_ms=env_float(
                f"{prefix}MONITORING_WINDOW_MS", defaults.monitoring_window_ms
            ),
            success_threshold=env_int(
                f"{prefix}SUCCESS_THRESHOLD", defaults.success_threshold
            ),
        )


@dataclass
class CircuitBreakerState:
    """Runtime state of a circuit breaker."""
    state: CircuitState = CircuitState.CLOSED
    consecutive_failures: int = 0
    last_failure_time: Optional[float] = None
    half_open_successes: int = 0
    probe_in_flight: bool = False

    # Metrics
    total_calls: int = 0
    total_failures: int = 0
    total_successes: int = 0
    total_rejections: int = 0
