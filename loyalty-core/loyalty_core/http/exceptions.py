from typing import Optional, Any


class ProviderError(Exception):
    """Base exception for all wallet-provider communication errors."""
    code: Optional[str] = None

    def __init__(
        self,
        message: str,
        service: str = "unknown",
        status_code: Optional[int] = None,
        details: Any = None,
        code: Optional[str] = None,
    ):
        self.message = message
        self.service = service
        self.status_code = status_code
        self.details = details
        if code is not None:
            self.code = code
        super().__init__(f"[{service}] {message} (Status: {status_code})")


class ProviderUnavailableError(ProviderError):
    """Raised when the provider is unreachable or answers with a 5xx."""
    pass


class ProviderConnectionError(ProviderUnavailableError):
    """Raised when no connection could be established."""
    code = "ECONNREFUSED"


class ProviderTimeoutError(ProviderUnavailableError):
    """Raised specifically on timeouts."""
    code = "ETIMEDOUT"


class ProviderRateLimitError(ProviderError):
    """Raised when the provider throttles the caller (429)."""
    pass


class ProviderAuthError(ProviderError):
    """Raised when provider authentication fails (401/403)."""
    pass


class ProviderNotFoundError(ProviderError):
    """Raised when the requested resource is not found (404)."""
    pass


class ProviderConflictError(ProviderError):
    """Raised when the resource already exists (409)."""
    pass


class ProviderValidationError(ProviderError):
    """Raised when the provider rejects the payload (400/422)."""
    pass
