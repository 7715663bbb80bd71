"""
Retry Presets
=============
Retry policies for wallet-provider calls and user notifications.
"""

from typing import Any, Dict, Optional

import structlog

from loyalty_core.clock import SYSTEM_CLOCK, Clock

from .backoff import Operation, invoke, retry
from .classification import message_of
from .models import RetryConfig

logger = structlog.get_logger(__name__)

WALLET_API_RETRY = RetryConfig(
    max_attempts=3,
    initial_delay_ms=1000,
    max_delay_ms=5000,
    backoff_factor=2,
    jitter=True,
)

# Fewer, shorter retries: a late notification is worth less than a fast failure
NOTIFICATION_RETRY = RetryConfig(
    max_attempts=2,
    initial_delay_ms=500,
    max_delay_ms=2000,
    backoff_factor=2,
    jitter=True,
)

_SENSITIVE_KEYS = {"credentials", "password", "token", "secret", "api_key", "private_key"}


def _redact(context: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: "[REDACTED]" if key in _SENSITIVE_KEYS and value else value
        for key, value in context.items()
    }


async def retry_wallet_api(
    operation: Operation,
    context: Optional[Dict[str, Any]] = None,
    config: RetryConfig = WALLET_API_RETRY,
    clock: Optional[Clock] = None,
):
    """
    Run a wallet-provider call with the wallet retry policy.

    Every attempt is logged as a ``wallet_operation`` event with its
    duration and, on failure, the interpreted provider error.

    Args:
        operation: Zero-argument callable issuing the provider request
        context: Log context; ``context["operation"]`` names the call
    """
    # Imported here, errors depends on the retry package
    from loyalty_core.errors import interpret_provider_error

    context = dict(context or {})
    clock = clock or SYSTEM_CLOCK
    op_name = context.get("operation", "unknown")
    safe_context = _redact(context)

    async def attempt():
        started = clock.now_ms()
        try:
            result = await invoke(operation)
        except Exception as e:
            logger.info(
                "wallet_operation",
                operation=op_name,
                data=safe_context,
                success=False,
                error=interpret_provider_error(e).to_dict(),
                duration_ms=clock.now_ms() - started,
            )
            raise
        logger.info(
            "wallet_operation",
            operation=op_name,
            data=safe_context,
            success=True,
            error=None,
            duration_ms=clock.now_ms() - started,
        )
        return result

    return await retry(attempt, config, name=op_name, clock=clock)


async def retry_notification(
    operation: Operation,
    user_id: str,
    kind: str,
    config: RetryConfig = NOTIFICATION_RETRY,
    clock: Optional[Clock] = None,
):
    """Run a notification send with the notification retry policy."""
    clock = clock or SYSTEM_CLOCK

    async def attempt():
        started = clock.now_ms()
        try:
            result = await invoke(operation)
        except Exception as e:
            logger.info(
                "notification_sent",
                user_id=user_id,
                type=kind,
                success=False,
                error=message_of(e),
                duration_ms=clock.now_ms() - started,
            )
            raise
        logger.info(
            "notification_sent",
            user_id=user_id,
            type=kind,
            success=True,
            error=None,
            duration_ms=clock.now_ms() - started,
        )
        return result

    return await retry(attempt, config, name=f"notification:{kind}", clock=clock)
