"""
Resilience Metrics
==================
Prometheus metrics for retry attempts and circuit breaker state.

Usage:
    from loyalty_core.metrics import get_metrics_text

    @app.get("/metrics")
    async def metrics():
        return PlainTextResponse(get_metrics_text())
"""

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

RESILIENCE_REGISTRY = CollectorRegistry()

RETRY_ATTEMPTS = Counter(
    name="retry_attempts_total",
    documentation="Operation attempts made by the retry executor",
    labelnames=["operation", "outcome"],
    registry=RESILIENCE_REGISTRY,
)

RETRY_EXHAUSTED = Counter(
    name="retry_exhausted_total",
    documentation="Retry invocations that ran out of attempts",
    labelnames=["operation"],
    registry=RESILIENCE_REGISTRY,
)

RETRY_DELAY = Histogram(
    name="retry_delay_seconds",
    documentation="Backoff delay applied before a retry",
    labelnames=["operation"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
    registry=RESILIENCE_REGISTRY,
)

CIRCUIT_BREAKER_STATE = Gauge(
    name="circuit_breaker_state",
    documentation="Circuit breaker state (0=closed, 1=half-open, 2=open)",
    labelnames=["breaker"],
    registry=RESILIENCE_REGISTRY,
)

CIRCUIT_BREAKER_TRANSITIONS = Counter(
    name="circuit_breaker_transitions_total",
    documentation="Circuit breaker state transitions",
    labelnames=["breaker", "state"],
    registry=RESILIENCE_REGISTRY,
)

CIRCUIT_BREAKER_REJECTIONS = Counter(
    name="circuit_breaker_rejections_total",
    documentation="Calls rejected while the circuit was open",
    labelnames=["breaker"],
    registry=RESILIENCE_REGISTRY,
)

_STATE_VALUES = {"closed": 0, "half_open": 1, "open": 2}


def record_attempt(operation: str, outcome: str):
    """
    Record one attempt.

    Args:
        operation: Operation name
        outcome: success, retryable_failure or fatal_failure
    """
    RETRY_ATTEMPTS.labels(operation=operation, outcome=outcome).inc()


def record_retry_delay(operation: str, delay_ms: float):
    RETRY_DELAY.labels(operation=operation).observe(delay_ms / 1000.0)


def record_exhausted(operation: str):
    RETRY_EXHAUSTED.labels(operation=operation).inc()


def record_circuit_state(breaker: str, state: str, transition: bool = True):
    """
    Record the current circuit breaker state.

    Args:
        breaker: Breaker name
        state: closed, half_open or open
        transition: Whether this is a state change (counted separately)
    """
    CIRCUIT_BREAKER_STATE.labels(breaker=breaker).set(_STATE_VALUES.get(state, -1))
    if transition:
        CIRCUIT_BREAKER_TRANSITIONS.labels(breaker=breaker, state=state).inc()


def record_rejection(breaker: str):
    CIRCUIT_BREAKER_REJECTIONS.labels(breaker=breaker).inc()


def get_metrics_text() -> bytes:
    """Render all resilience metrics in the Prometheus text format."""
    return generate_latest(RESILIENCE_REGISTRY)


__all__ = [
    "RESILIENCE_REGISTRY",
    "CONTENT_TYPE_LATEST",
    "record_attempt",
    "record_retry_delay",
    "record_exhausted",
    "record_circuit_state",
    "record_rejection",
    "get_metrics_text",
]
