"""
Provider Error Interpretation
=============================
Turns wallet-provider and resilience failures into client-facing error info.

Route handlers use ``error_response`` so a tripped breaker or an exhausted
retry reaches the client as a retryable 503 rather than a hard failure.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple

import structlog

from loyalty_core.exceptions import CircuitBreakerOpen, RetryExhausted
from loyalty_core.retry.classification import message_of, status_of

logger = structlog.get_logger(__name__)


@dataclass
class ProviderErrorInfo:
    """Interpreted provider failure."""
    type: str
    message: str
    status: Optional[int] = None
    retryable: bool = False
    user_message: str = "An unexpected error occurred"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# status -> (type, user message, retryable)
_STATUS_TABLE = {
    400: ("BAD_REQUEST", "Invalid request data", False),
    401: ("UNAUTHORIZED", "Authentication failed", False),
    403: ("FORBIDDEN", "Access denied", False),
    404: ("NOT_FOUND", "Resource not found", False),
    409: ("CONFLICT", "Resource already exists", False),
    429: ("RATE_LIMITED", "Too many requests, please try again later", True),
    500: ("INTERNAL_SERVER_ERROR", "Server error, please try again", True),
    502: ("SERVICE_UNAVAILABLE", "Service temporarily unavailable", True),
    503: ("SERVICE_UNAVAILABLE", "Service temporarily unavailable", True),
    504: ("SERVICE_UNAVAILABLE", "Service temporarily unavailable", True),
}


def interpret_provider_error(exc: BaseException) -> ProviderErrorInfo:
    """
    Interpret a wallet-provider failure.

    The HTTP status decides the type first; well-known message patterns
    then refine it (a "quota" message also marks the error retryable).
    """
    message = message_of(exc)
    status = status_of(exc)
    info = ProviderErrorInfo(type="UNKNOWN_ERROR", message=message, status=status)

    if status in _STATUS_TABLE:
        info.type, info.user_message, info.retryable = _STATUS_TABLE[status]

    lowered = message.lower()
    if "not found" in lowered:
        info.type = "RESOURCE_NOT_FOUND"
        info.user_message = "The requested resource was not found"
    elif "already exists" in lowered:
        info.type = "RESOURCE_EXISTS"
        info.user_message = "Resource already exists"
    elif "invalid" in lowered:
        info.type = "INVALID_DATA"
        info.user_message = "Invalid data provided"
    elif "permission" in lowered or "access" in lowered:
        info.type = "ACCESS_DENIED"
        info.user_message = "Access denied"
    elif "quota" in lowered or "limit" in lowered:
        info.type = "QUOTA_EXCEEDED"
        info.user_message = "API quota exceeded"
        info.retryable = True
    elif "class id" in lowered:
        info.type = "MISSING_CLASS_ID"
        info.user_message = "Missing or invalid class ID"

    return info


def error_response(exc: BaseException, default_status: int = 500) -> Tuple[int, Dict[str, Any]]:
    """
    Build an HTTP status and JSON body for a failed operation.

    Returns:
        (status_code, body) where body has success, error, message, retryable
    """
    if isinstance(exc, CircuitBreakerOpen):
        return 503, {
            "success": False,
            "error": "CIRCUIT_OPEN",
            "message": "Service temporarily unavailable, please try again later",
            "retryable": True,
            "retry_after_ms": exc.retry_after_ms,
        }

    if isinstance(exc, RetryExhausted):
        body = {
            "success": False,
            "error": "RETRIES_EXHAUSTED",
            "message": "Service temporarily unavailable, please try again later",
            "retryable": True,
            "attempts": exc.attempts,
        }
        if exc.last_exception is not None:
            body["cause"] = interpret_provider_error(exc.last_exception).type
        return 503, body

    info = interpret_provider_error(exc)
    status = info.status if info.status and 400 <= info.status < 600 else default_status

    logger.error(
        "provider_error",
        error_type=info.type,
        status=status,
        error=info.message,
        retryable=info.retryable,
    )

    return status, {
        "success": False,
        "error": info.type,
        "message": info.user_message,
        "retryable": info.retryable,
    }
