"""
Retry Backoff
=============
Exponential backoff retry executor.
"""

import inspect
import random
from functools import wraps
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

import structlog

from loyalty_core import metrics
from loyalty_core.clock import SYSTEM_CLOCK, Clock
from loyalty_core.exceptions import RetryExhausted

from .classification import is_retryable, message_of
from .models import RetryConfig

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Operation = Callable[[], Union[T, Awaitable[T]]]

MIN_JITTERED_DELAY_MS = 100.0
JITTER_RATIO = 0.25

DEFAULT_RETRY_CONFIG = RetryConfig()


def operation_name(operation: Callable[..., Any]) -> str:
    name = getattr(operation, "__name__", None)
    if not name or name == "<lambda>":
        return "anonymous"
    return name


async def invoke(operation: Callable[..., Any], *args, **kwargs) -> Any:
    """Call ``operation`` and await its result when it is awaitable."""
    result = operation(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


def calculate_delay(
    base_delay_ms: float,
    config: RetryConfig,
    rand: Callable[[], float] = random.random,
) -> float:
    """
    Apply jitter to a backoff delay.

    Without jitter the base delay is returned unchanged. With jitter the
    delay moves by up to 25% either way and never drops below 100ms.
    """
    if not config.jitter:
        return base_delay_ms

    offset = base_delay_ms * JITTER_RATIO * (rand() - 0.5) * 2
    return max(MIN_JITTERED_DELAY_MS, base_delay_ms + offset)


async def retry(
    operation: Operation,
    config: Optional[RetryConfig] = None,
    *,
    name: Optional[str] = None,
    clock: Optional[Clock] = None,
    log: Optional[Any] = None,
    rand: Callable[[], float] = random.random,
    classify: Callable[[BaseException], bool] = is_retryable,
) -> T:
    """
    Execute an operation with exponential backoff retry.

    Args:
        operation: Zero-argument callable, sync or async
        config: Retry configuration (defaults to ``RetryConfig()``)
        name: Operation name for logs and metrics
        clock: Time source used for sleeping between attempts
        log: structlog logger receiving attempt events
        rand: Random source for jitter, returning floats in [0, 1)
        classify: Retryability predicate

    Returns:
        Result of the operation

    Raises:
        The operation's own error when it is not retryable or attempts run
        out. ``RetryExhausted`` instead on exhaustion when
        ``config.raise_exhausted`` is set.
    """
    config = config or DEFAULT_RETRY_CONFIG
    clock = clock or SYSTEM_CLOCK
    log = log or logger
    op_name = name or operation_name(operation)

    delay = config.initial_delay_ms
    attempt = 1

    while True:
        log.debug(
            "retry_attempt",
            operation=op_name,
            attempt=attempt,
            max_attempts=config.max_attempts,
            delay=delay if attempt > 1 else 0,
        )
        started = clock.now_ms()

        try:
            result = await invoke(operation)
        except Exception as e:
            duration = clock.now_ms() - started
            retryable = classify(e)

            log.warning(
                "retry_attempt_failed",
                operation=op_name,
                attempt=attempt,
                max_attempts=config.max_attempts,
                error=message_of(e),
                retryable=retryable,
                duration_ms=duration,
            )

            if not retryable:
                metrics.record_attempt(op_name, "fatal_failure")
                log.error(
                    "retry_non_retryable",
                    operation=op_name,
                    attempt=attempt,
                    error=message_of(e),
                )
                raise

            metrics.record_attempt(op_name, "retryable_failure")

            if attempt >= config.max_attempts:
                metrics.record_exhausted(op_name)
                log.error(
                    "retry_exhausted",
                    operation=op_name,
                    max_attempts=config.max_attempts,
                    final_error=message_of(e),
                )
                if config.raise_exhausted:
                    raise RetryExhausted(
                        f"Failed after {config.max_attempts} attempts: {message_of(e)}",
                        last_exception=e,
                        attempts=attempt,
                    ) from e
                raise

            actual_delay = calculate_delay(delay, config, rand)
            log.debug(
                "retry_delay",
                operation=op_name,
                attempt=attempt,
                delay=actual_delay,
            )
            metrics.record_retry_delay(op_name, actual_delay)

            await clock.sleep_ms(actual_delay)
            delay = min(delay * config.backoff_factor, config.max_delay_ms)
            attempt += 1
            continue

        metrics.record_attempt(op_name, "success")
        if attempt > 1:
            log.info(
                "retry_succeeded",
                operation=op_name,
                attempt=attempt,
                total_attempts=attempt,
            )
        return result


def with_retry(
    config: Optional[RetryConfig] = None,
    name: Optional[str] = None,
    clock: Optional[Clock] = None,
):
    """
    Decorator for retry with exponential backoff.

    Usage:
        @with_retry(RetryConfig(max_attempts=5))
        async def fetch_loyalty_class(class_id):
            ...
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Awaitable[Any]]:
        op_name = name or operation_name(func)

        @wraps(func)
        async def wrapper(*args, **kwargs):
            return await retry(
                lambda: func(*args, **kwargs),
                config,
                name=op_name,
                clock=clock,
            )
        return wrapper
    return decorator
