"""
Unit Tests for Failure Classification
=====================================
"""

import errno
import socket

import httpx
import pytest

from conftest import ProviderFailure
from loyalty_core.exceptions import CircuitBreakerOpen
from loyalty_core.http import ProviderConnectionError, ProviderError, ProviderTimeoutError
from loyalty_core.retry import is_retryable, status_of


class NetworkFailure(Exception):
    def __init__(self, code: str):
        super().__init__("socket failure")
        self.code = code


class TestStatusCodes:

    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_retryable_status_codes(self, status):
        """Should identify retryable status codes."""
        assert is_retryable(ProviderFailure(status)) is True

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 409])
    def test_non_retryable_status_codes(self, status):
        """Should identify non-retryable status codes."""
        assert is_retryable(ProviderFailure(status)) is False

    def test_status_on_code_attribute(self):
        """A numeric ``code`` counts as a status."""
        error = Exception("upstream")
        error.code = 503
        assert is_retryable(error) is True

    def test_status_from_httpx_response(self):
        """httpx status errors are classified by their response status."""
        request = httpx.Request("GET", "https://wallet.example/loyaltyClass/1")
        error = httpx.HTTPStatusError(
            "boom", request=request, response=httpx.Response(502, request=request)
        )

        assert status_of(error) == 502
        assert is_retryable(error) is True

    def test_boolean_is_not_a_status(self):
        error = Exception("flag")
        error.status = True
        assert status_of(error) is None


class TestNetworkErrors:

    @pytest.mark.parametrize("code", ["ECONNRESET", "ENOTFOUND", "ECONNREFUSED", "ETIMEDOUT"])
    def test_network_codes(self, code):
        """Should identify network error codes as retryable."""
        assert is_retryable(NetworkFailure(code)) is True

    def test_unknown_code_is_not_retryable(self):
        assert is_retryable(NetworkFailure("EACCES")) is False

    @pytest.mark.parametrize(
        "error",
        [
            ConnectionResetError("reset"),
            ConnectionRefusedError("refused"),
            TimeoutError(),
            socket.gaierror(socket.EAI_NONAME, "Name or service not known"),
            OSError(errno.ETIMEDOUT, "timed out"),
        ],
    )
    def test_builtin_network_errors(self, error):
        """Standard library network failures are retryable."""
        assert is_retryable(error) is True

    def test_httpx_transport_errors(self):
        request = httpx.Request("GET", "https://wallet.example")
        assert is_retryable(httpx.ConnectError("refused", request=request)) is True
        assert is_retryable(httpx.ReadTimeout("slow", request=request)) is True

    def test_provider_errors_carry_codes(self):
        """Mapped provider errors are retryable through their network code."""
        assert is_retryable(ProviderTimeoutError("Request timed out", service="wallet")) is True
        assert is_retryable(ProviderConnectionError("Failed to connect", service="wallet")) is True


class TestMessages:

    @pytest.mark.parametrize(
        "message",
        [
            "timeout",
            "network error",
            "connection refused",
            "service unavailable",
            "Rate Limit exceeded",
            "Daily QUOTA reached",
            "Request Timeout while saving pass",
        ],
    )
    def test_retryable_messages(self, message):
        """Should identify retryable error messages, ignoring case."""
        assert is_retryable(Exception(message)) is True

    @pytest.mark.parametrize("message", ["Invalid class id", "Permission denied", ""])
    def test_other_messages(self, message):
        assert is_retryable(Exception(message)) is False

    def test_message_attribute_preferred(self):
        """The ``message`` attribute is used over the formatted string."""
        error = ProviderError("Bad request", service="network-gateway", status_code=400)

        assert "network" in str(error)
        assert is_retryable(error) is False


class TestCircuitOpen:

    def test_circuit_open_never_retryable(self):
        """Rejections are not retried even if the name mentions a connection."""
        error = CircuitBreakerOpen("wallet-connection", 5, 5, 1000)
        assert is_retryable(error) is False
