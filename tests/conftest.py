"""
Pytest configuration and fixtures
"""

import socket

import pytest

from saga_transport import HttpClientTransport, TransportConfig

from .stub_server import StubServer


@pytest.fixture
def stub_server():
    """Running stub HTTP server"""
    server = StubServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def silent_address():
    """Address of a socket that accepts connections but never answers"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(8)
    yield f"127.0.0.1:{sock.getsockname()[1]}"
    sock.close()


@pytest.fixture
def closed_address():
    """Address nobody listens on"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"127.0.0.1:{port}"


@pytest.fixture
def test_config():
    """Short timeouts for tests"""
    return TransportConfig(timeout_connect=1.0, timeout_read=2.0)


@pytest.fixture
def transport(test_config):
    """Synchronous transport fixture"""
    return HttpClientTransport(test_config)
