"""
Aiohttp-based transport (asynchronous).
"""

import asyncio
import logging
import time
from typing import Any, Optional

import aiohttp
import requests
from yarl import URL

from ..config import TransportConfig
from ..exceptions import (
    InvalidUriError,
    NetworkError,
    ResponseTooLargeError,
    TransactionFailedError,
)
from ..metrics import record_request
from ..request import Params, build_request
from ..responses import (
    SagaResponse,
    SuccessfulSagaResponse,
    charset_from_content_type,
    classify,
    decode_body,
)

logger = logging.getLogger("saga_transport.http.async")

CHUNK_SIZE = 8192


class AsyncHttpClientTransport:
    """
    Asynchronous transport using the aiohttp library.

    Builds requests exactly like ``HttpClientTransport`` and reports the same
    outcomes, without blocking the event loop.

    Examples:
        >>> async def book():
        ...     async with AsyncHttpClientTransport() as transport:
        ...         return await transport.invoke("localhost:8080", "/rest/bookings", "GET")
    """

    def __init__(
        self,
        config: Optional[TransportConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize aiohttp transport.

        Args:
            config: Transport configuration
            session: Optional aiohttp.ClientSession instance, not closed by
                this transport. Without it a session is opened by ``async with``
                or by the first invocation, and released by ``close``.
        """
        self.config = config or TransportConfig()
        self._external_session = session is not None
        self.session = session

    async def __aenter__(self) -> "AsyncHttpClientTransport":
        """Context manager entry."""
        if self.session is None:
            self.session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the session."""
        if not self._external_session and self.session:
            await self.session.close()
            self.session = None

    async def invoke(
        self,
        address: str,
        path: str,
        method: str,
        params: Optional[Params] = None,
    ) -> SuccessfulSagaResponse:
        """
        Invoke a remote operation.

        Returns:
            Successful response for 2xx status codes

        Raises:
            TransactionFailedError: On any routing, URI, remote or transport
                failure
        """
        start = time.time()
        try:
            request = build_request(
                address,
                path,
                method,
                params,
                headers={"User-Agent": self.config.user_agent},
            )
            response = await self._execute(request)
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

    async def outcome(
        self,
        address: str,
        path: str,
        method: str,
        params: Optional[Params] = None,
    ) -> SagaResponse:
        """Same as ``invoke`` but returns failures as ``FailedSagaResponse``."""
        try:
            return await self.invoke(address, path, method, params)
        except TransactionFailedError as e:
            return e.to_response()

    async def _execute(self, request: requests.PreparedRequest) -> SuccessfulSagaResponse:
        if self.session is None:
            # opened lazily outside ``async with``, released by close()
            self.session = aiohttp.ClientSession()

        # aiohttp computes the length of the payload itself
        headers = {
            name: value
            for name, value in request.headers.items()
            if name.lower() != "content-length"
        }
        timeout = aiohttp.ClientTimeout(
            sock_connect=self.config.timeout_connect,
            sock_read=self.config.timeout_read,
        )

        logger.debug("Request %s %s", request.method, request.url)

        try:
            async with self.session.request(
                method=request.method,
                url=URL(request.url, encoded=True),
                headers=headers,
                data=request.body,
                timeout=timeout,
                allow_redirects=False,
            ) as response:
                content = await self._read_body(response)
                status, reason = response.status, response.reason
        except aiohttp.InvalidURL as e:
            raise InvalidUriError(e) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(e) from e

        logger.debug(
            "Response %d %s",
            status,
            content[:1000],
            extra={"status_code": status, "url": request.url},
        )
        return classify(status, reason, content)

    async def _read_body(self, response: aiohttp.ClientResponse) -> str:
        limit = self.config.max_response_bytes
        chunks = []
        size = 0
        async for chunk in response.content.iter_chunked(CHUNK_SIZE):
            size += len(chunk)
            if limit is not None and size > limit:
                raise ResponseTooLargeError(limit)
            chunks.append(chunk)

        charset = charset_from_content_type(response.headers.get("Content-Type"))
        return decode_body(b"".join(chunks), charset)
