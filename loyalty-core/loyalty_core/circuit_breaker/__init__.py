"""
Loyalty Core - Circuit Breaker
==============================
Async circuit breaker for wallet-provider resilience.

Circuit breaker pattern stops hammering the wallet provider while it is
failing. States:

1. CLOSED: Normal operation, requests flow through
2. OPEN: Provider is failing, requests are immediately rejected
3. HALF-OPEN: A single probe tests whether the provider has recovered

Usage:
    from loyalty_core.circuit_breaker import circuit_breaker, CircuitBreakerOpen

    @circuit_breaker("wallet-get-class")
    async def get_loyalty_class(class_id: str):
        return await client.get(f"/loyaltyClass/{class_id}")

    # Or around a block
    async with breaker.guard():
        response = await client.get("/loyaltyObject/123")
"""

from loyalty_core.exceptions import CircuitBreakerOpen

from .models import (
    CircuitState,
    CircuitBreakerConfig,
    CircuitBreakerState,
)

from .breaker import CircuitBreaker, wrap

from .registry import BreakerRegistry

from .decorators import circuit_breaker

__all__ = [
    # Models
    "CircuitState",
    "CircuitBreakerOpen",
    "CircuitBreakerConfig",
    "CircuitBreakerState",
    # Breaker
    "CircuitBreaker",
    "wrap",
    # Registry
    "BreakerRegistry",
    # Decorator
    "circuit_breaker",
]
