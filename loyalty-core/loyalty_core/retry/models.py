"""
Retry Models
============
Configuration for the retry executor.
"""

from dataclasses import dataclass, replace

from loyalty_core.env import env_bool, env_float, env_int
from loyalty_core.exceptions import ConfigurationError


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for one retry invocation. Delays are in milliseconds."""
    max_attempts: int = 3
    initial_delay_ms: float = 1000.0
    max_delay_ms: float = 10000.0
    backoff_factor: float = 2.0
    jitter: bool = True            # +/-25% randomisation, 100ms floor
    raise_exhausted: bool = False  # Raise RetryExhausted instead of the last error

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ConfigurationError("max_attempts must be at least 1")
        if self.initial_delay_ms < 0:
            raise ConfigurationError("initial_delay_ms must not be negative")
        if self.max_delay_ms < self.initial_delay_ms:
            raise ConfigurationError("max_delay_ms must be >= initial_delay_ms")
        if self.backoff_factor < 1:
            raise ConfigurationError("backoff_factor must be at least 1")

    def with_overrides(self, **changes) -> "RetryConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_env(cls, prefix: str = "RETRY_") -> "RetryConfig":
        """Build a config from ``{prefix}MAX_ATTEMPTS`` and friends."""
        defaults = cls()
        return cls(
            max_attempts=env_int(f"{prefix}MAX_ATTEMPTS", defaults.max_attempts),
            initial_delay_ms=env_float(
                f"{prefix}INITIAL_DELAY_MS", defaults.initial_delay_ms
            ),
            max_delay_ms=env_float(f"{prefix}MAX_DELAY_MS", defaults.max_delay_ms),
            backoff_factor=env_float(
                f"{prefix}BACKOFF_FACTOR", defaults.backoff_factor
            ),
            jitter=env_bool(f"{prefix}JITTER", defaults.jitter),
            raise_exhausted=env_bool(
                f"{prefix}RAISE_EXHAUSTED", defaults.raise_exhausted
            ),
        )
