import dataclasses

import httpx
import structlog
from typing import Optional, Type, TypeVar, Any, Dict, Union
from pydantic import BaseModel, ValidationError

from loyalty_core.circuit_breaker import BreakerRegistry, CircuitBreakerConfig
from loyalty_core.clock import SYSTEM_CLOCK, Clock
from loyalty_core.retry import RetryConfig, WALLET_API_RETRY, retry

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

# Generic type for Pydantic models
T = TypeVar("T", bound=BaseModel)

logger = structlog.get_logger(__name__)

# Answers about the request itself, not the health of the provider
CLIENT_ERRORS = (
    ProviderNotFoundError,
    ProviderValidationError,
    ProviderConflictError,
    ProviderAuthError,
)


class ProviderClient:
    """
    Resilient async HTTP client for the wallet provider.

    Features:
    - Retries with exponential backoff on transient failures.
    - One circuit breaker per operation name, owned by this client.
    - Connection pooling (via httpx.AsyncClient).
    - Pydantic model deserialization.
    - Standardized exception mapping.
    """

    def __init__(
        self,
        base_url: str,
        service_name: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        retry_config: Optional[RetryConfig] = None,
        breaker_config: Optional[CircuitBreakerConfig] = None,
        clock: Optional[Clock] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_name = service_name
        self.timeout = timeout
        self.retry_config = retry_config or WALLET_API_RETRY
        self._clock = clock or SYSTEM_CLOCK
        breaker_config = breaker_config or CircuitBreakerConfig()
        if not breaker_config.excluded_exceptions:
            breaker_config = dataclasses.replace(breaker_config, excluded_exceptions=CLIENT_ERRORS)
        self.breakers = BreakerRegistry(default_config=breaker_config, clock=self._clock)

        headers = {
            "User-Agent": f"Loyalty-Wallet-Client/{service_name}",
            "Accept": "application/json",
        }
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    async def aclose(self):
        """Close the underlying HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "ProviderClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False

    def _error_message(self, response: httpx.Response, default: str) -> str:
        """Pull the provider's own error message out of a JSON error body."""
        try:
            body = response.json()
        except ValueError:
            return default
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and isinstance(error.get("message"), str):
                return error["message"]
            if isinstance(error, str):
                return error
        return default

    def _map_exception(self, exc: httpx.HTTPError) -> ProviderError:
        """Map httpx exceptions to provider exceptions."""
        if isinstance(exc, httpx.TimeoutException):
            return ProviderTimeoutError("Request timed out", service=self.service_name)
        if isinstance(exc, httpx.ConnectError):
            return ProviderConnectionError(f"Failed to connect: {exc}", service=self.service_name)
        if isinstance(exc, httpx.TransportError):
            return ProviderUnavailableError(
                f"Transport failure: {exc}", service=self.service_name, code="ECONNRESET"
            )
        if isinstance(exc, httpx.HTTPStatusError):
            response = exc.response
            status = response.status_code
            text = response.text
            if status in (400, 422):
                message = self._error_message(response, "Invalid request data")
                return ProviderValidationError(message, service=self.service_name, status_code=status, details=text)
            if status in (401, 403):
                message = self._error_message(response, "Unauthorized" if status == 401 else "Forbidden")
                return ProviderAuthError(message, service=self.service_name, status_code=status)
            if status == 404:
                message = self._error_message(response, "Resource not found")
                return ProviderNotFoundError(message, service=self.service_name, status_code=status)
            if status == 409:
                message = self._error_message(response, "Resource already exists")
                return ProviderConflictError(message, service=self.service_name, status_code=status, details=text)
            if status == 429:
                message = self._error_message(response, "Rate limit exceeded")
                return ProviderRateLimitError(message, service=self.service_name, status_code=status, details=text)
            if status >= 500:
                message = self._error_message(response, "Server error")
                return ProviderUnavailableError(message, service=self.service_name, status_code=status, details=text)

            return ProviderError(f"HTTP {status} Error", service=self.service_name, status_code=status, details=text)

        return ProviderError(f"Unexpected error: {exc}", service=self.service_name)

    async def _send(
        self,
        method: str,
        path: str,
        response_model: Optional[Type[T]] = None,
        **kwargs
    ) -> Union[T, Dict[str, Any], None]:
        """Execute a single request attempt."""
        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise self._map_exception(e) from e

        if response.status_code == 204:
            return None

        try:
            body = response.json()
            if response_model:
                return response_model.model_validate(body)
        except (ValueError, ValidationError) as e:
            raise ProviderError(
                "Malformed response body",
                service=self.service_name,
                status_code=response.status_code,
                details=str(e),
            ) from e

        return body

    async def _request(
        self,
        method: str,
        path: str,
        response_model: Optional[Type[T]] = None,
        operation: Optional[str] = None,
        **kwargs
    ) -> Union[T, Dict[str, Any], None]:
        """Execute request through the operation's breaker, with retries."""
        breaker = self.breakers.get(operation or self.service_name)
        op_name = operation or f"{self.service_name}:{method}"

        logger.debug("provider_request", provider=self.service_name, method=method, path=path, operation=op_name)

        return await retry(
            lambda: breaker.call(self._send, method, path, response_model, **kwargs),
            self.retry_config,
            name=op_name,
            clock=self._clock,
        )

    async def get(self, path: str, params: Optional[Dict] = None, response_model: Optional[Type[T]] = None, operation: Optional[str] = None) -> Union[T, Dict, None]:
        return await self._request("GET", path, params=params, response_model=response_model, operation=operation)

    async def post(self, path: str, json: Any = None, response_model: Optional[Type[T]] = None, operation: Optional[str] = None) -> Union[T, Dict, None]:
        return await self._request("POST", path, json=json, response_model=response_model, operation=operation)

    async def put(self, path: str, json: Any = None, response_model: Optional[Type[T]] = None, operation: Optional[str] = None) -> Union[T, Dict, None]:
        return await self._request("PUT", path, json=json, response_model=response_model, operation=operation)

    async def patch(self, path: str, json: Any = None, response_model: Optional[Type[T]] = None, operation: Optional[str] = None) -> Union[T, Dict, None]:
        return await self._request("PATCH", path, json=json, response_model=response_model, operation=operation)

    async def delete(self, path: str, response_model: Optional[Type[T]] = None, operation: Optional[str] = None) -> Union[T, Dict, None]:
        return await self._request("DELETE", path, response_model=response_model, operation=operation)
