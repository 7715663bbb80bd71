"""
Circuit Breaker Registry
========================
Named breakers owned by one component.

A registry is an ordinary object: the component that registers operations
(a provider client, a notification sender) creates and keeps its own, so
breakers of unrelated components never share state.
"""

from typing import Any, Dict, List, Optional

import structlog

from loyalty_core.clock import Clock

from .breaker import CircuitBreaker
from .models import CircuitBreakerConfig

logger = structlog.get_logger(__name__)


class BreakerRegistry:
    """Get-or-create store of circuit breakers keyed by operation name."""

    def __init__(
        self,
        default_config: Optional[CircuitBreakerConfig] = None,
        clock: Optional[Clock] = None,
    ):
        self.default_config = default_config
        self._clock = clock
        self._breakers: Dict[str, CircuitBreaker] = {}

    def get(
        self,
        name: str,
        config: Optional[CircuitBreakerConfig] = None,
    ) -> CircuitBreaker:
        """
        Get or create the breaker for an operation.

        Args:
            name: Operation name
            config: Optional configuration (only used if creating new breaker)

        Returns:
            CircuitBreaker instance
        """
        breaker = self._breakers.get(name)
        if breaker is None:
            breaker = CircuitBreaker(
                name=name,
                config=config or self.default_config,
                clock=self._clock,
            )
            self._breakers[name] = breaker
            logger.debug("circuit_registered", breaker=name)
        return breaker

    def __contains__(self, name: str) -> bool:
        return name in self._breakers

    def names(self) -> List[str]:
        return list(self._breakers)

    def metrics(self) -> Dict[str, Dict[str, Any]]:
        """Get metrics for all registered circuit breakers."""
        return {
            name: breaker.metrics
            for name, breaker in self._breakers.items()
        }

    def reset(self, name: str):
        """Reset a circuit breaker to closed state (for testing/admin)."""
        if name in self._breakers:
            self._breakers[name].reset()

    def reset_all(self):
        for breaker in self._breakers.values():
            breaker.reset()
