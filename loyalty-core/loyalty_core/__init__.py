"""
Loyalty Core Library
====================
Resilience layer for the loyalty wallet service: retries with exponential
backoff and circuit breakers around wallet-provider and notification calls.
"""

__version__ = "0.1.0"

# Exceptions
from loyalty_core.exceptions import (
    ResilienceError,
    ConfigurationError,
    RetryExhausted,
    CircuitBreakerOpen,
)

# Clock
from loyalty_core.clock import Clock, SYSTEM_CLOCK

# Retry
from loyalty_core.retry import (
    RetryConfig,
    retry,
    with_retry,
    is_retryable,
    calculate_delay,
    retry_wallet_api,
    retry_notification,
)

# Circuit Breaker
from loyalty_core.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitState,
    BreakerRegistry,
    circuit_breaker,
    wrap,
)

# Configuration
from loyalty_core.config import ResilienceSettings
from loyalty_core.log_config import configure_logging, configure_from_settings

# Errors
from loyalty_core.errors import (
    ProviderErrorInfo,
    interpret_provider_error,
    error_response,
)

# Provider Client
from loyalty_core.http import ProviderClient, ProviderError

# Metrics
from loyalty_core.metrics import get_metrics_text

__all__ = [
    # Exceptions
    "ResilienceError",
    "ConfigurationError",
    "RetryExhausted",
    "CircuitBreakerOpen",
    # Clock
    "Clock",
    "SYSTEM_CLOCK",
    # Retry
    "RetryConfig",
    "retry",
    "with_retry",
    "is_retryable",
    "calculate_delay",
    "retry_wallet_api",
    "retry_notification",
    # Circuit Breaker
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitState",
    "BreakerRegistry",
    "circuit_breaker",
    "wrap",
    # Configuration
    "ResilienceSettings",
    "configure_logging",
    "configure_from_settings",
    # Errors
    "ProviderErrorInfo",
    "interpret_provider_error",
    "error_response",
    # Provider Client
    "ProviderClient",
    "ProviderError",
    # Metrics
    "get_metrics_text",
]
