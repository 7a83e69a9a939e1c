"""
HTTP transports for remote saga invocations.
"""

from .adapter import Transport
from .requests_transport import HttpClientTransport
from .aiohttp_transport import AsyncHttpClientTransport

__all__ = ["Transport", "HttpClientTransport", "AsyncHttpClientTransport"]
