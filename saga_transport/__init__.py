"""
Saga HTTP transport.

Turns a remote invocation ``(address, path, method, params)`` into a single
HTTP exchange and normalizes the result into a successful response or a typed
failure.
"""

from .__version__ import __version__
from .config import TransportConfig
from .exceptions import (
    ConfigurationError,
    ErrorKind,
    InvalidParametersError,
    InvalidUriError,
    NetworkError,
    NoSuchMethodError,
    RemoteServiceError,
    ResponseTooLargeError,
    TransactionFailedError,
)
from .http import AsyncHttpClientTransport, HttpClientTransport, Transport
from .request import METHOD_FACTORIES, build_request
from .responses import FailedSagaResponse, SagaResponse, SuccessfulSagaResponse

__all__ = [
    "TransportConfig",
    "Transport",
    "HttpClientTransport",
    "AsyncHttpClientTransport",
    "METHOD_FACTORIES",
    "build_request",
    "SagaResponse",
    "SuccessfulSagaResponse",
    "FailedSagaResponse",
    "ErrorKind",
    "TransactionFailedError",
    "NoSuchMethodError",
    "InvalidUriError",
    "RemoteServiceError",
    "NetworkError",
    "ResponseTooLargeError",
    "InvalidParametersError",
    "ConfigurationError",
    "__version__",
]
