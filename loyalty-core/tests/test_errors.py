"""
Unit Tests for Provider Error Interpretation
============================================
"""

import pytest

from conftest import ProviderFailure
from loyalty_core.errors import error_response, interpret_provider_error
from loyalty_core.exceptions import CircuitBreakerOpen, RetryExhausted


class TestInterpretProviderError:

    @pytest.mark.parametrize(
        "status, error_type, retryable",
        [
            (400, "BAD_REQUEST", False),
            (401, "UNAUTHORIZED", False),
            (403, "FORBIDDEN", False),
            (409, "CONFLICT", False),
            (429, "RATE_LIMITED", True),
            (500, "INTERNAL_SERVER_ERROR", True),
            (502, "SERVICE_UNAVAILABLE", True),
            (503, "SERVICE_UNAVAILABLE", True),
            (504, "SERVICE_UNAVAILABLE", True),
        ],
    )
    def test_status_table(self, status, error_type, retryable):
        info = interpret_provider_error(ProviderFailure(status, "Provider error"))

        assert info.type == error_type
        assert info.retryable is retryable
        assert info.status == status

    @pytest.mark.parametrize(
        "message, error_type",
        [
            ("Loyalty class not found", "RESOURCE_NOT_FOUND"),
            ("Object already exists", "RESOURCE_EXISTS"),
            ("Invalid barcode type", "INVALID_DATA"),
            ("Caller lacks permission", "ACCESS_DENIED"),
            ("Missing class id", "MISSING_CLASS_ID"),
        ],
    )
    def test_message_patterns(self, message, error_type):
        """Should refine the type from well-known provider messages."""
        assert interpret_provider_error(Exception(message)).type == error_type

    def test_quota_is_retryable(self):
        info = interpret_provider_error(ProviderFailure(403, "Quota exceeded for project"))

        assert info.type == "QUOTA_EXCEEDED"
        assert info.retryable is True

    def test_unknown_error(self):
        info = interpret_provider_error(RuntimeError("something odd"))

        assert info.type == "UNKNOWN_ERROR"
        assert info.retryable is False
        assert info.user_message == "An unexpected error occurred"


class TestErrorResponse:

    def test_circuit_open(self):
        """A tripped breaker becomes a retryable 503."""
        status, body = error_response(CircuitBreakerOpen("wallet", 5, 5, 30000))

        assert status == 503
        assert body["error"] == "CIRCUIT_OPEN"
        assert body["retryable"] is True
        assert body["retry_after_ms"] == 30000

    def test_retries_exhausted(self):
        cause = ProviderFailure(503, "Backend down")
        status, body = error_response(RetryExhausted("gave up", last_exception=cause, attempts=3))

        assert status == 503
        assert body["error"] == "RETRIES_EXHAUSTED"
        assert body["retryable"] is True
        assert body["attempts"] == 3
        assert body["cause"] == "SERVICE_UNAVAILABLE"

    def test_provider_status_used(self):
        status, body = error_response(ProviderFailure(409, "Provider error"))

        assert status == 409
        assert body == {
            "success": False,
            "error": "CONFLICT",
            "message": "Resource already exists",
            "retryable": False,
        }

    def test_default_status(self):
        status, body = error_response(RuntimeError("boom"))

        assert status == 500
        assert body["error"] == "UNKNOWN_ERROR"
