"""
Exception classes for the saga HTTP transport.

Every failure the transport produces is a ``TransactionFailedError``. The
``kind`` attribute tells callers which part of the exchange failed so they can
decide whether to retry, compensate or abort.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Failure taxonomy of a remote invocation."""

    ROUTING = "routing"
    URI = "uri"
    REMOTE = "remote"
    TRANSPORT = "transport"
    PARAMETERS = "parameters"


class TransactionFailedError(Exception):
    """Base exception for all transport failures."""

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        """
        Initialize transaction failure.

        Args:
            message: Human-readable failure message
            cause: Underlying exception, if any
        """
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def to_response(self) -> "FailedSagaResponse":
        """Convert this failure into the failed response variant."""
        from .responses import FailedSagaResponse

        return FailedSagaResponse(message=self.message, kind=self.kind, cause=self.cause)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"kind={self.kind.value!r}, "
            f"cause={self.cause!r})"
        )


class NoSuchMethodError(TransactionFailedError):
    """
    Unsupported HTTP method.

    Raised before any network activity when the method is not in the
    dispatch table.
    """

    kind = ErrorKind.ROUTING

    def __init__(self, method: str):
        super().__init__(f"No such method {method}")
        self.method = method


class InvalidUriError(TransactionFailedError):
    """Host, path or query cannot form a valid URI."""

    kind = ErrorKind.URI

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__("Wrong request URI", cause)


class RemoteServiceError(TransactionFailedError):
    """
    Remote rejection.

    Raised when the exchange completed but the remote service answered with a
    status code outside of 2xx.
    """

    kind = ErrorKind.REMOTE

    def __init__(self, status_code: int, reason: str, content: str):
        """
        Initialize remote rejection.

        Args:
            status_code: HTTP status code
            reason: HTTP reason phrase
            content: Full response body text
        """
        super().__init__(
            f"The remote service returned with status code {status_code}"
            f", reason {reason}, and content {content}"
        )
        self.status_code = status_code
        self.reason = reason
        self.content = content


class NetworkError(TransactionFailedError):
    """
    Transport-level I/O failure.

    Connection refused, timeouts, resets and truncated responses all end up
    here.
    """

    kind = ErrorKind.TRANSPORT

    def __init__(self, cause: Optional[BaseException] = None, message: str = "Network Error"):
        super().__init__(message, cause)


class ResponseTooLargeError(NetworkError):
    """Response body exceeded the configured ``max_response_bytes``."""

    def __init__(self, limit: int):
        super().__init__(message=f"Response body exceeds {limit} bytes")
        self.limit = limit


class InvalidParametersError(TransactionFailedError):
    """Request parameters are malformed or contradictory."""

    kind = ErrorKind.PARAMETERS


class ConfigurationError(Exception):
    """Transport configuration error."""

    pass
