from .client import ProviderClient
from .exceptions import (
    ProviderError,
    ProviderUnavailableError,
    ProviderConnectionError,
    ProviderTimeoutError,
    ProviderRateLimitError,
    ProviderAuthError,
    ProviderNotFoundError,
    ProviderConflictError,
    ProviderValidationError,
)

__all__ = [
    "ProviderClient",
    "ProviderError",
    "ProviderUnavailableError",
    "ProviderConnectionError",
    "ProviderTimeoutError",
    "ProviderRateLimitError",
    "ProviderAuthError",
    "ProviderNotFoundError",
    "ProviderConflictError",
    "ProviderValidationError",
]
