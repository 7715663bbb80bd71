"""
Resilience Exceptions
=====================
Exception classes raised by the retry executor and circuit breaker.
"""

from typing import Optional


class ResilienceError(Exception):
    """Base exception for the resilience layer."""
    pass


class ConfigurationError(ResilienceError, ValueError):
    """Raised when a retry or breaker configuration is invalid."""
    pass


class RetryExhausted(ResilienceError):
    """Raised when all retry attempts have been exhausted."""

    def __init__(
        self,
        message: str,
        last_exception: Optional[BaseException] = None,
        attempts: int = 0,
    ):
        super().__init__(message)
        self.last_exception = last_exception
        self.attempts = attempts


class CircuitBreakerOpen(ResilienceError):
    """Raised when a call is rejected because the circuit is open."""

    def __init__(
        self,
        name: str,
        failure_count: int,
        threshold: int,
        retry_after_ms: float,
    ):
        self.name = name
        self.failure_count = failure_count
        self.threshold = threshold
        self.retry_after_ms = retry_after_ms
        super().__init__(
            f"Circuit breaker '{name}' is OPEN - operation temporarily disabled "
            f"({failure_count}/{threshold} failures, "
            f"retry after {retry_after_ms / 1000:.1f}s)"
        )
