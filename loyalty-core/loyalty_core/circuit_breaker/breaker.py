"""
Circuit Breaker Core
====================
The CircuitBreaker class guarding one operation.
"""

import asyncio
from contextlib import asynccontextmanager
from functools import wraps
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TypeVar

import structlog

from loyalty_core import metrics
from loyalty_core.clock import SYSTEM_CLOCK, Clock
from loyalty_core.exceptions import CircuitBreakerOpen
from loyalty_core.retry.backoff import invoke, operation_name

from .models import CircuitBreakerConfig, CircuitBreakerState, CircuitState

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class CircuitBreaker:
    """
    Async-compatible circuit breaker.

    Each breaker owns its state and should guard exactly one operation.
    State checks and updates run under an asyncio lock; the lock is released
    while the operation itself runs. In HALF_OPEN only one probe call is let
    through at a time, concurrent callers are rejected as if still open.

    Example:
        breaker = CircuitBreaker("wallet-loyalty-class")

        try:
            result = await breaker.call(client.get, "/loyaltyClass/123")
        except CircuitBreakerOpen:
            return cached_value
    """

    def __init__(
        self,
        name: str,
        config: Optional[CircuitBreakerConfig] = None,
        clock: Optional[Clock] = None,
        log: Optional[Any] = None,
    ):
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._clock = clock or SYSTEM_CLOCK
        self._log = log or logger
        self._state = CircuitBreakerState()
        self._lock = asyncio.Lock()
        metrics.record_circuit_state(name, CircuitState.CLOSED.value, transition=False)

    @property
    def state(self) -> CircuitState:
        """Current circuit state."""
        return self._state.state

    @property
    def consecutive_failures(self) -> int:
        return self._state.consecutive_failures

    @property
    def metrics(self) -> Dict[str, Any]:
        """Get circuit breaker metrics."""
        return {
            "name": self.name,
            "state": self._state.state.value,
            "consecutive_failures": self._state.consecutive_failures,
            "half_open_successes": self._state.half_open_successes,
            "failure_threshold": self.config.failure_threshold,
            "total_calls": self._state.total_calls,
            "total_failures": self._state.total_failures,
            "total_successes": self._state.total_successes,
            "total_rejections": self._state.total_rejections,
            "last_failure": self._state.last_failure_time,
        }

    def reset(self):
        """Reset to closed state (for testing/admin)."""
        self._state = CircuitBreakerState()
        metrics.record_circuit_state(self.name, CircuitState.CLOSED.value)
        self._log.info("circuit_reset", breaker=self.name)

    def _transition(self, new_state: CircuitState, event: str, **fields):
        self._state.state = new_state
        metrics.record_circuit_state(self.name, new_state.value)
        log_method = self._log.warning if new_state == CircuitState.OPEN else self._log.info
        log_method(
            event,
            breaker=self.name,
            failures=self._state.consecutive_failures,
            threshold=self.config.failure_threshold,
            **fields,
        )

    def _reject(self, now: float) -> CircuitBreakerOpen:
        self._state.total_rejections += 1
        metrics.record_rejection(self.name)

        retry_after = 0.0
        if self._state.state == CircuitState.OPEN and self._state.last_failure_time is not None:
            elapsed = now - self._state.last_failure_time
            retry_after = max(0.0, self.config.reset_timeout_ms - elapsed)

        self._log.debug("circuit_rejected", breaker=self.name, state=self._state.state.value)
        return CircuitBreakerOpen(
            self.name,
            self._state.consecutive_failures,
            self.config.failure_threshold,
            retry_after,
        )

    async def _acquire(self) -> Tuple[bool, float]:
        """
        Check and possibly transition state.

        Returns:
            (probe, started): whether this call is the half-open probe, and the
            time the call was admitted
        """
        async with self._lock:
            now = self._clock.now_ms()
            st = self._state

            if (
                st.last_failure_time is not None
                and now - st.last_failure_time > self.config.monitoring_window_ms
            ):
                previous = st.state
                st.consecutive_failures = 0
                st.half_open_successes = 0
                st.last_failure_time = None
                st.probe_in_flight = False
                if previous != CircuitState.CLOSED:
                    self._transition(CircuitState.CLOSED, "circuit_window_reset")
                else:
                    self._log.debug("circuit_window_reset", breaker=self.name)

            if st.state == CircuitState.OPEN:
                if now - st.last_failure_time >= self.config.reset_timeout_ms:
                    st.half_open_successes = 0
                    st.probe_in_flight = False
                    self._transition(CircuitState.HALF_OPEN, "circuit_half_open")
                else:
                    raise self._reject(now)

            if st.state == CircuitState.HALF_OPEN:
                if st.probe_in_flight:
                    raise self._reject(now)
                st.probe_in_flight = True
                return True, now

            return False, now

    async def _record_success(self, probe: bool):
        async with self._lock:
            st = self._state
            st.total_calls += 1
            st.total_successes += 1

            if probe:
                st.probe_in_flight = False

            if st.state == CircuitState.HALF_OPEN and probe:
                st.half_open_successes += 1
                if st.half_open_successes >= self.config.success_threshold:
                    st.consecutive_failures = 0
                    st.half_open_successes = 0
                    self._transition(CircuitState.CLOSED, "circuit_closed")

            elif st.state == CircuitState.CLOSED:
                st.consecutive_failures = 0

    async def _record_failure(self, exc: Exception, probe: bool, started: float):
        if isinstance(exc, self.config.excluded_exceptions):
            if probe:
                self._release_probe()
            return

        async with self._lock:
            st = self._state
            st.total_calls += 1
            st.total_failures += 1
            st.consecutive_failures += 1
            # Failures are timed from admission; overlapping calls never move it back
            if st.last_failure_time is None or started > st.last_failure_time:
                st.last_failure_time = started

            if probe:
                st.probe_in_flight = False

            if st.state == CircuitState.HALF_OPEN and probe:
                self._transition(CircuitState.OPEN, "circuit_reopened", error=str(exc))

            elif (
                st.state == CircuitState.CLOSED
                and st.consecutive_failures >= self.config.failure_threshold
            ):
                self._transition(CircuitState.OPEN, "circuit_opened", error=str(exc))

    def _release_probe(self):
        # No await: must also run while the task is being cancelled
        self._state.probe_in_flight = False

    async def call(self, operation: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Execute an operation with circuit breaker protection.

        Args:
            operation: Callable, sync or async
            *args: Positional arguments
            **kwargs: Keyword arguments

        Returns:
            Result of operation

        Raises:
            CircuitBreakerOpen: If the circuit is open
        """
        probe, started = await self._acquire()

        try:
            result = await invoke(operation, *args, **kwargs)
        except Exception as e:
            await self._record_failure(e, probe, started)
            raise
        except BaseException:
            if probe:
                self._release_probe()
            raise

        await self._record_success(probe)
        return result

    @asynccontextmanager
    async def guard(self):
        """
        Guard a block of code instead of a single callable.

        Example:
            async with breaker.guard():
                response = await client.get("/loyaltyObject/123")
        """
        probe, started = await self._acquire()

        try:
            yield self
        except Exception as e:
            await self._record_failure(e, probe, started)
            raise
        except BaseException:
            if probe:
                self._release_probe()
            raise

        await self._record_success(probe)

    def wrap(self, operation: Callable[..., Any]) -> Callable[..., Awaitable[Any]]:
        """Return an async callable that runs ``operation`` through this breaker."""
        @wraps(operation)
        async def guarded(*args, **kwargs):
            return await self.call(operation, *args, **kwargs)

        guarded.breaker = self
        return guarded


def wrap(
    operation: Callable[..., Any],
    config: Optional[CircuitBreakerConfig] = None,
    name: Optional[str] = None,
    clock: Optional[Clock] = None,
) -> Callable[..., Awaitable[Any]]:
    """
    Guard an operation with a breaker of its own.

    The breaker is reachable as ``guarded.breaker``.
    """
    breaker = CircuitBreaker(name or operation_name(operation), config, clock=clock)
    return breaker.wrap(operation)
