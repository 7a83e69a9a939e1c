"""
Response models and status classification.
"""

from email.message import Message
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .exceptions import ErrorKind, RemoteServiceError


class SagaResponse(BaseModel):
    """Outcome of a remote invocation"""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def succeeded(self) -> bool:
        return False


class SuccessfulSagaResponse(SagaResponse):
    """2xx response with its body text"""

    status_code: int
    body: str

    @property
    def succeeded(self) -> bool:
        return True


class FailedSagaResponse(SagaResponse):
    """Failed invocation with a descriptive message"""

    message: str
    kind: ErrorKind
    cause: Optional[BaseException] = None


def classify(status_code: int, reason: Optional[str], content: str) -> SuccessfulSagaResponse:
    """
    Map a completed HTTP exchange to an outcome.

    Args:
        status_code: HTTP status code
        reason: HTTP reason phrase
        content: Full response body text

    Returns:
        Successful response for status codes in [200, 300)

    Raises:
        RemoteServiceError: For any other status code
    """
    if 200 <= status_code < 300:
        return SuccessfulSagaResponse(status_code=status_code, body=content)
    raise RemoteServiceError(status_code, reason or "", content)


def decode_body(raw: bytes, charset: Optional[str] = None) -> str:
    """Decode a response body using the declared charset, UTF-8 otherwise."""
    try:
        return raw.decode(charset or "utf-8", errors="replace")
    except LookupError:
        # unknown charset label
        return raw.decode("utf-8", errors="replace")


def charset_from_content_type(content_type: Optional[str]) -> Optional[str]:
    """Extract the ``charset`` parameter of a Content-Type header value."""
    if not content_type:
        return None
    message = Message()
    message["content-type"] = content_type
    return message.get_content_charset()
