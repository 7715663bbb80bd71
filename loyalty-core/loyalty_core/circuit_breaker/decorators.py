"""
Circuit Breaker Decorator
=========================
Decorator for wrapping functions with circuit breaker protection.
"""

from functools import wraps
from typing import Any, Awaitable, Callable, Optional

from loyalty_core.clock import Clock

from .breaker import CircuitBreaker
from .models import CircuitBreakerConfig
from .registry import BreakerRegistry


def circuit_breaker(
    name: str,
    config: Optional[CircuitBreakerConfig] = None,
    registry: Optional[BreakerRegistry] = None,
    clock: Optional[Clock] = None,
):
    """
    Decorator to wrap a function with a circuit breaker.

    Without a registry each decorated function gets a breaker of its own.
    With one, functions decorated under the same name share its breaker.

    Example:
        @circuit_breaker("wallet-insert-object")
        async def insert_loyalty_object(payload: dict):
            return await wallet_client.post("/loyaltyObject", json=payload)
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Awaitable[Any]]:
        if registry is not None:
            breaker = registry.get(name, config)
        else:
            breaker = CircuitBreaker(name, config, clock=clock)

        @wraps(func)
        async def wrapper(*args, **kwargs):
            return await breaker.call(func, *args, **kwargs)

        wrapper.breaker = breaker
        return wrapper

    return decorator
