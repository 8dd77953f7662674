"""
Tests for the error classifier.
"""

import httpx
import pytest

from flightlabs.services.classifier import (
    AttemptOutcome,
    classify,
    error_from_exception,
    error_from_outcome,
    extract_api_error,
)
from flightlabs.services.errors import (
    ClientRequestError,
    ErrorKind,
    NetworkError,
    RequestTimeoutError,
    ServerError,
    UnknownUpstreamError,
    UpstreamApplicationError,
)


# =============================================================================
# classify()
# =============================================================================


class TestClassify:
    @pytest.mark.parametrize("status", [400, 401, 404, 429])
    def test_4xx_is_client_error(self, status):
        result = classify(AttemptOutcome(status_code=status))
        assert result.kind == ErrorKind.CLIENT_ERROR
        assert result.retryable is False
        assert result.code == status
        assert result.message == f"API request failed with status {status}"

    @pytest.mark.parametrize("status", [500, 502, 503])
    def test_5xx_is_server_error(self, status):
        result = classify(AttemptOutcome(status_code=status))
        assert result.kind == ErrorKind.SERVER_ERROR
        assert result.retryable is True

    def test_no_response_is_network(self):
        exc = httpx.ConnectError("connection refused")
        result = classify(AttemptOutcome(transport_error=exc))
        assert result.kind == ErrorKind.NETWORK
        assert result.retryable is True
        assert "connection refused" in result.message

    def test_api_error_body_with_200(self):
        body = {"error": {"code": 104, "type": "usage_limit_reached", "info": "Limit hit"}}
        result = classify(AttemptOutcome(status_code=200, body=body))
        assert result.kind == ErrorKind.UPSTREAM_APPLICATION_ERROR
        assert result.retryable is False
        assert result.code == 104
        assert result.error_type == "usage_limit_reached"
        assert result.message == "Limit hit"

    def test_api_error_body_with_4xx_takes_precedence(self):
        body = {"error": {"code": 101, "type": "invalid_access_key"}}
        result = classify(AttemptOutcome(status_code=401, body=body))
        assert result.kind == ErrorKind.UPSTREAM_APPLICATION_ERROR
        assert result.retryable is False
        assert result.message == "invalid_access_key"

    def test_api_error_body_with_5xx_is_retryable(self):
        body = {"error": {"info": "temporarily unavailable"}}
        result = classify(AttemptOutcome(status_code=503, body=body))
        assert result.kind == ErrorKind.UPSTREAM_APPLICATION_ERROR
        assert result.retryable is True
        assert result.code == 503

    def test_success_false_without_error_object(self):
        result = classify(AttemptOutcome(status_code=200, body={"success": False}))
        assert result.kind == ErrorKind.UPSTREAM_APPLICATION_ERROR
        assert result.message == "API returned unsuccessful response"

    def test_anything_else_is_unknown(self):
        result = classify(AttemptOutcome(transport_error=RuntimeError("boom")))
        assert result.kind == ErrorKind.UNKNOWN
        assert result.retryable is True
        assert result.message == "Request failed: RuntimeError: boom"

    def test_empty_outcome_is_unknown(self):
        result = classify(AttemptOutcome())
        assert result.kind == ErrorKind.UNKNOWN
        assert result.message == "Request failed: unexpected response"


class TestExtractApiError:
    def test_plain_payload_has_no_error(self):
        assert extract_api_error({"success": True, "data": []}) is None
        assert extract_api_error([{"airline_iata": "EK"}]) is None
        assert extract_api_error(None) is None

    def test_error_object_returned(self):
        error = {"code": 1, "info": "x"}
        assert extract_api_error({"error": error}) is error


# =============================================================================
# Exceptions
# =============================================================================


class TestErrorConstruction:
    def test_status_mapping_to_classes(self):
        assert isinstance(error_from_outcome(AttemptOutcome(status_code=404)), ClientRequestError)
        assert isinstance(error_from_outcome(AttemptOutcome(status_code=500)), ServerError)
        body = {"error": {"info": "bad"}}
        assert isinstance(
            error_from_outcome(AttemptOutcome(status_code=200, body=body)),
            UpstreamApplicationError,
        )

    def test_timeout_becomes_request_timeout(self):
        exc = httpx.ReadTimeout("timed out")
        error = error_from_outcome(AttemptOutcome(transport_error=exc, timeout=5.0))
        assert isinstance(error, RequestTimeoutError)
        assert isinstance(error, NetworkError)
        assert error.kind == ErrorKind.NETWORK
        assert error.retryable is True
        assert "5.0s" in error.message

    def test_retryable_carried_onto_instance(self):
        body = {"error": {"info": "down"}}
        error = error_from_outcome(AttemptOutcome(status_code=502, body=body))
        assert isinstance(error, UpstreamApplicationError)
        assert error.retryable is True
        assert error.status_code == 502

    def test_error_from_exception_passes_flightlabs_errors_through(self):
        original = ServerError("down", code=503)
        assert error_from_exception(original) is original

    def test_error_from_exception_wraps_others(self):
        error = error_from_exception(ValueError("bad json"))
        assert isinstance(error, UnknownUpstreamError)
        assert error.retryable is True

    def test_to_dict(self):
        error = ClientRequestError("nope", code=404)
        assert error.to_dict() == {
            "kind": "client_error",
            "code": 404,
            "type": None,
            "message": "nope",
            "retryable": False,
        }
