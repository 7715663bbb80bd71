"""
Failure Classification
======================
Decides whether a failure is transient and worth another attempt.

Structured fields (HTTP status, network error code) are checked first; the
message substring match is the fallback for errors that carry neither.
"""

import asyncio
import errno
import socket
from typing import Optional

import httpx

from loyalty_core.exceptions import CircuitBreakerOpen

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

NETWORK_ERROR_CODES = frozenset({"ECONNRESET", "ENOTFOUND", "ECONNREFUSED", "ETIMEDOUT"})

NETWORK_ERRNOS = frozenset({errno.ECONNRESET, errno.ECONNREFUSED, errno.ETIMEDOUT})

NETWORK_ERROR_TYPES = (
    ConnectionResetError,
    ConnectionRefusedError,
    TimeoutError,
    asyncio.TimeoutError,
    socket.gaierror,  # host not found
    httpx.TimeoutException,
    httpx.ConnectError,
)

RETRYABLE_MESSAGE_FRAGMENTS = (
    "timeout",
    "network",
    "connection",
    "service unavailable",
    "rate limit",
    "quota",
)


def _as_status(value) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def status_of(exc: BaseException) -> Optional[int]:
    """Return the HTTP-style status carried by an exception, if any."""
    for attr in ("status_code", "status", "code"):
        status = _as_status(getattr(exc, attr, None))
        if status is not None:
            return status

    response = getattr(exc, "response", None)
    if response is not None:
        return _as_status(getattr(response, "status_code", None))
    return None


def message_of(exc: BaseException) -> str:
    """Return the human-readable message of an exception."""
    message = getattr(exc, "message", None)
    if isinstance(message, str):
        return message
    return str(exc)


def has_network_code(exc: BaseException) -> bool:
    code = getattr(exc, "code", None)
    if isinstance(code, str) and code.upper() in NETWORK_ERROR_CODES:
        return True

    if isinstance(exc, NETWORK_ERROR_TYPES):
        return True

    return isinstance(exc, OSError) and exc.errno in NETWORK_ERRNOS


def is_retryable(exc: BaseException) -> bool:
    """
    Classify a failure as transient.

    Returns True for retryable HTTP statuses (429, 500, 502, 503, 504),
    network failures (reset, host not found, refused, timed out) and
    messages mentioning timeouts, network or connection trouble, service
    unavailability, rate limits or quota. Circuit-open rejections are never
    retried.
    """
    if isinstance(exc, CircuitBreakerOpen):
        return False

    if status_of(exc) in RETRYABLE_STATUS_CODES:
        return True

    if has_network_code(exc):
        return True

    message = message_of(exc).lower()
    return any(fragment in message for fragment in RETRYABLE_MESSAGE_FRAGMENTS)
