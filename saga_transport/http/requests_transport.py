"""
Requests-based transport (synchronous).
"""

import logging
import threading
import time
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import TransportConfig
from ..exceptions import NetworkError, ResponseTooLargeError, TransactionFailedError
from ..logging_setup import setup_logging
from ..metrics import record_request
from ..request import Params, build_request
from ..responses import SuccessfulSagaResponse, charset_from_content_type, classify, decode_body
from .adapter import Transport

logger = logging.getLogger("saga_transport.http")

CHUNK_SIZE = 8192


def new_session() -> requests.Session:
    """
    Create a requests session that never retries.

    Returns:
        Session with a zero-retry adapter mounted for ``http://``
    """
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=Retry(total=0, read=False))
    session.mount("http://", adapter)
    return session


class HttpClientTransport(Transport):
    """
    Synchronous transport using the requests library.

    Features:
    - One outbound request per invocation, no retries
    - Query, JSON and form parameter encoding
    - Status code classification into success or typed failure
    - Optional cap on buffered response size

    Examples:
        >>> transport = HttpClientTransport()
        >>> response = transport.invoke(
        ...     "localhost:8080",
        ...     "/rest/bookings",
        ...     "POST",
        ...     {"form": {"hotel": "grand", "nights": "2"}},
        ... )
        >>> response.status_code
        200
    """

    def __init__(
        self,
        config: Optional[TransportConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize requests transport.

        Args:
            config: Transport configuration
            session: Optional requests.Session, used by every thread as-is.
                Without it each thread gets its own session.
        """
        self.config = config or TransportConfig()
        self._session = session
        self._local = threading.local()

        if self.config.debug:
            setup_logging(debug=True)

    @property
    def session(self) -> requests.Session:
        """Session used by the calling thread."""
        if self._session is not None:
            return self._session
        session = getattr(self._local, "session", None)
        if session is None:
            session = new_session()
            self._local.session = session
        return session

    def invoke(
        self,
        address: str,
        path: str,
        method: str,
        params: Optional[Params] = None,
    ) -> SuccessfulSagaResponse:
        start = time.time()
        try:
            request = build_request(
                address,
                path,
                method,
                params,
                headers={"User-Agent": self.config.user_agent},
            )
            response = self._execute(request)
        except TransactionFailedError as e:
            record_request(method, e.kind.value, time.time() - start)
            logger.warning(
                "Remote invocation failed: %s",
                e.message,
                extra={"method": method, "url": f"{address}{path}", "kind": e.kind.value},
            )
            raise

        record_request(method, "success", time.time() - start)
        return response

    def _execute(self, request: requests.PreparedRequest) -> SuccessfulSagaResponse:
        """
        Send a prepared request and classify its response.

        Raises:
            NetworkError: On any I/O failure, including truncated bodies
            RemoteServiceError: On non-2xx status codes
        """
        logger.debug("Request %s %s", request.method, request.url)

        try:
            with self.session.send(
                request,
                stream=True,
                allow_redirects=False,
                timeout=self.config.timeout,
            ) as response:
                content = self._read_body(response)
        except requests.exceptions.RequestException as e:
            raise NetworkError(e) from e

        logger.debug(
            "Response %d %s",
            response.status_code,
            content[:1000],
            extra={"status_code": response.status_code, "url": request.url},
        )
        return classify(response.status_code, response.reason, content)

    def _read_body(self, response: requests.Response) -> str:
        limit = self.config.max_response_bytes
        chunks = []
        size = 0
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            size += len(chunk)
            if limit is not None and size > limit:
                raise ResponseTooLargeError(limit)
            chunks.append(chunk)

        charset = charset_from_content_type(response.headers.get("Content-Type"))
        return decode_body(b"".join(chunks), charset)
