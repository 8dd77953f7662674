"""
Error classifier - decides whether a failed attempt is worth retrying.

Rules, in order:
- An application error object in the body ({"error": {code, type, info}}
  or {"success": false}) is surfaced as-is, whatever the HTTP status.
  It is only retryable when the wrapping status was a 5xx.
- 4xx -> client error, never retried.
- 5xx -> server error, retried.
- No response at all (timeout, reset, DNS) -> network error, retried.
- Anything else -> unknown, retried.
"""

from dataclasses import dataclass
from typing import Any

import httpx

from flightlabs.services.errors import (
    ClientRequestError,
    ErrorKind,
    FlightLabsError,
    NetworkError,
    RequestTimeoutError,
    ServerError,
    UnknownUpstreamError,
    UpstreamApplicationError,
)


@dataclass(frozen=True)
class AttemptOutcome:
    """Raw transport-level result of one HTTP attempt."""

    status_code: int | None = None
    body: Any = None
    transport_error: BaseException | None = None
    timeout: float | None = None


@dataclass(frozen=True)
class Classification:
    """Classifier verdict for a failed attempt."""

    kind: ErrorKind
    retryable: bool
    message: str
    code: int | None = None
    error_type: str | None = None
    info: str | None = None


def extract_api_error(body: Any) -> dict[str, Any] | None:
    """Return the application error object from a response body, if any."""
    if not isinstance(body, dict):
        return None

    error = body.get("error")
    if isinstance(error, dict):
        return error
    if body.get("success") is False:
        return {"info": "API returned unsuccessful response"}
    return None


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def classify(outcome: AttemptOutcome) -> Classification:
    """Classify a failed attempt. Pure function."""
    status = outcome.status_code

    api_error = extract_api_error(outcome.body)
    if api_error is not None:
        info = api_error.get("info") or api_error.get("message")
        error_type = api_error.get("type")
        message = str(info or error_type or "FlightLabs API error")
        return Classification(
            kind=ErrorKind.UPSTREAM_APPLICATION_ERROR,
            retryable=status is not None and status >= 500,
            message=message,
            code=_as_int(api_error.get("code")) or status,
            error_type=error_type,
            info=info,
        )

    if status is not None and 400 <= status < 500:
        return Classification(
            kind=ErrorKind.CLIENT_ERROR,
            retryable=False,
            message=f"API request failed with status {status}",
            code=status,
        )

    if status is not None and status >= 500:
        return Classification(
            kind=ErrorKind.SERVER_ERROR,
            retryable=True,
            message=f"API request failed with status {status}",
            code=status,
        )

    if status is None and isinstance(outcome.transport_error, httpx.TransportError):
        return Classification(
            kind=ErrorKind.NETWORK,
            retryable=True,
            message=f"No response received from API: {outcome.transport_error}",
        )

    if outcome.transport_error is not None:
        detail = f"{type(outcome.transport_error).__name__}: {outcome.transport_error}"
    else:
        detail = "unexpected response"
    return Classification(
        kind=ErrorKind.UNKNOWN,
        retryable=True,
        message=f"Request failed: {detail}",
        code=status,
    )


_ERROR_CLASSES: dict[ErrorKind, type[FlightLabsError]] = {
    ErrorKind.CLIENT_ERROR: ClientRequestError,
    ErrorKind.SERVER_ERROR: ServerError,
    ErrorKind.NETWORK: NetworkError,
    ErrorKind.UPSTREAM_APPLICATION_ERROR: UpstreamApplicationError,
    ErrorKind.UNKNOWN: UnknownUpstreamError,
}


def error_from_outcome(outcome: AttemptOutcome) -> FlightLabsError:
    """Build the exception matching the classification of an attempt."""
    if isinstance(outcome.transport_error, httpx.TimeoutException):
        return RequestTimeoutError(outcome.timeout)

    result = classify(outcome)
    error_cls = _ERROR_CLASSES[result.kind]
    return error_cls(
        result.message,
        code=result.code,
        error_type=result.error_type,
        info=result.info,
        status_code=outcome.status_code,
        retryable=result.retryable,
    )


def error_from_exception(exc: BaseException) -> FlightLabsError:
    """Classify an exception raised by a request function."""
    if isinstance(exc, FlightLabsError):
        return exc
    return error_from_outcome(AttemptOutcome(transport_error=exc))
