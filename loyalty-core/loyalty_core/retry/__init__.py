"""
Retry Logic with Exponential Backoff
=====================================
Retry executor for transient wallet-provider and notification failures.

Usage:
    from loyalty_core.retry import retry, RetryConfig

    result = await retry(
        lambda: client.get(f"/loyaltyClass/{class_id}"),
        RetryConfig(max_attempts=5, initial_delay_ms=200),
        name="get_loyalty_class",
    )
"""

from loyalty_core.exceptions import RetryExhausted

from .models import RetryConfig
from .classification import (
    RETRYABLE_STATUS_CODES,
    NETWORK_ERROR_CODES,
    RETRYABLE_MESSAGE_FRAGMENTS,
    is_retryable,
    status_of,
)
from .backoff import retry, with_retry, calculate_delay, DEFAULT_RETRY_CONFIG
from .presets import (
    WALLET_API_RETRY,
    NOTIFICATION_RETRY,
    retry_wallet_api,
    retry_notification,
)

__all__ = [
    # Models
    "RetryConfig",
    "RetryExhausted",
    "DEFAULT_RETRY_CONFIG",
    # Classification
    "RETRYABLE_STATUS_CODES",
    "NETWORK_ERROR_CODES",
    "RETRYABLE_MESSAGE_FRAGMENTS",
    "is_retryable",
    "status_of",
    # Backoff
    "retry",
    "with_retry",
    "calculate_delay",
    # Presets
    "WALLET_API_RETRY",
    "NOTIFICATION_RETRY",
    "retry_wallet_api",
    "retry_notification",
]
