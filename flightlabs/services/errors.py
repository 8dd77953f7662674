"""
Service layer exceptions.

Every terminal failure raised by the request layer is a FlightLabsError
carrying the classified kind, so callers can tell "your parameters were
rejected" from "try again later" from "no network".
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Classified failure kinds."""

    CLIENT_ERROR = "client_error"  # 4xx
    SERVER_ERROR = "server_error"  # 5xx
    NETWORK = "network"  # no response received
    UPSTREAM_APPLICATION_ERROR = "upstream_application_error"
    UNKNOWN = "unknown"


class FlightLabsError(Exception):
    """Base exception for FlightLabs client errors."""

    kind: ErrorKind = ErrorKind.UNKNOWN
    retryable: bool = True

    def __init__(
        self,
        message: str,
        code: int | None = None,
        error_type: str | None = None,
        info: str | None = None,
        status_code: int | None = None,
        retryable: bool | None = None,
    ):
        self.message = message
        self.code = code
        self.error_type = error_type
        self.info = info
        self.status_code = status_code
        if retryable is not None:
            self.retryable = retryable
        super().__init__(message)

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "code": self.code,
            "type": self.error_type,
            "message": self.message,
            "retryable": self.retryable,
        }


class ClientRequestError(FlightLabsError):
    """The API rejected the request (bad parameters, auth failure, not found)."""

    kind = ErrorKind.CLIENT_ERROR
    retryable = False


class ServerError(FlightLabsError):
    """Upstream failure, considered transient."""

    kind = ErrorKind.SERVER_ERROR
    retryable = True


class NetworkError(FlightLabsError):
    """No response was received."""

    kind = ErrorKind.NETWORK
    retryable = True


class RequestTimeoutError(NetworkError):
    """Request timed out."""

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout
        message = "Request to FlightLabs timed out"
        if timeout is not None:
            message += f" after {timeout}s"
        super().__init__(message)


class UpstreamApplicationError(FlightLabsError):
    """The API answered with a structured business error in the body."""

    kind = ErrorKind.UPSTREAM_APPLICATION_ERROR
    retryable = False


class UnknownUpstreamError(FlightLabsError):
    """Failure that fits no other category."""

    kind = ErrorKind.UNKNOWN
    retryable = True


class InvalidQueryError(FlightLabsError):
    """Query rejected locally before any request was made."""

    kind = ErrorKind.CLIENT_ERROR
    retryable = False


class ConfigurationError(FlightLabsError):
    """Client is missing required configuration."""

    kind = ErrorKind.CLIENT_ERROR
    retryable = False
