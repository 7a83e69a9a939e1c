"""
Tests for synchronous transport.
"""

from concurrent.futures import ThreadPoolExecutor
from urllib.parse import parse_qsl

import pytest
import requests
from requests_mock import Mocker

from saga_transport import HttpClientTransport, TransportConfig
from saga_transport.exceptions import (
    ErrorKind,
    InvalidParametersError,
    InvalidUriError,
    NetworkError,
    NoSuchMethodError,
    RemoteServiceError,
    ResponseTooLargeError,
)
from saga_transport.http.adapter import Transport
from saga_transport.responses import FailedSagaResponse, SuccessfulSagaResponse

from .stub_server import HANGUP, TRUNCATED


class TestInvoke:
    """Test invocations against a stub server."""

    @pytest.mark.parametrize("method", ["GET", "POST", "PUT", "DELETE"])
    def test_issues_exact_verb(self, transport, stub_server, method):
        stub_server.respond("/rest/bookings", 200, "booked")

        response = transport.invoke(stub_server.address, "/rest/bookings", method.lower())

        assert response == SuccessfulSagaResponse(status_code=200, body="booked")
        assert [r.method for r in stub_server.requests] == [method]

    def test_no_content(self, transport, stub_server):
        stub_server.respond("/rest/cancel", 204)

        response = transport.invoke(stub_server.address, "/rest/cancel", "DELETE")

        assert response.status_code == 204
        assert response.body == ""
        assert response.succeeded is True

    def test_not_found(self, transport, stub_server):
        stub_server.respond("/rest/missing", 404, "not found")

        with pytest.raises(RemoteServiceError) as exc_info:
            transport.invoke(stub_server.address, "/rest/missing", "GET")

        error = exc_info.value
        assert error.kind is ErrorKind.REMOTE
        assert error.status_code == 404
        assert error.reason == "Not Found"
        assert error.content == "not found"
        assert str(error) == (
            "The remote service returned with status code 404, "
            "reason Not Found, and content not found"
        )

    def test_server_error(self, transport, stub_server):
        stub_server.respond("/rest/boom", 500, "boom")

        with pytest.raises(RemoteServiceError, match="status code 500"):
            transport.invoke(stub_server.address, "/rest/boom", "POST")

    def test_redirect_status_is_not_success(self, transport, stub_server):
        stub_server.respond("/rest/moved", 304)

        with pytest.raises(RemoteServiceError) as exc_info:
            transport.invoke(stub_server.address, "/rest/moved", "GET")

        assert exc_info.value.status_code == 304

    @pytest.mark.parametrize("method", ["GET", "POST", "PUT", "DELETE"])
    def test_redirect_is_not_followed(self, transport, stub_server, method):
        """Test that a 3xx ends the invocation instead of reaching the Location."""
        stub_server.respond("/rest/book", 302, "moved", headers={"Location": "/rest/other"})
        stub_server.respond("/rest/other", 200, "ok")

        with pytest.raises(RemoteServiceError) as exc_info:
            transport.invoke(stub_server.address, "/rest/book", method, {"form": {"a": "1"}})

        assert exc_info.value.status_code == 302
        assert exc_info.value.content == "moved"
        assert [(r.method, r.path) for r in stub_server.requests] == [(method, "/rest/book")]

    def test_query_and_json_reach_server(self, transport, stub_server):
        transport.invoke(
            stub_server.address,
            "/rest/bookings",
            "POST",
            {"query": {"a": "1", "b": "2"}, "json": {"body": '{"x":1}'}},
        )

        recorded = stub_server.requests[0]
        assert set(parse_qsl(recorded.query)) == {("a", "1"), ("b", "2")}
        assert recorded.body == b'{"x":1}'
        assert recorded.headers["Content-Type"] == "application/json"

    def test_form_reaches_server(self, transport, stub_server):
        transport.invoke(stub_server.address, "/rest/bookings", "PUT", {"form": {"nights": "2"}})

        recorded = stub_server.requests[0]
        assert recorded.body == b"nights=2"
        assert recorded.headers["Content-Type"] == "application/x-www-form-urlencoded"

    def test_user_agent(self, stub_server):
        transport = HttpClientTransport(TransportConfig(user_agent="saga-coordinator/2"))

        transport.invoke(stub_server.address, "/", "GET")

        assert stub_server.requests[0].headers["User-Agent"] == "saga-coordinator/2"

    def test_body_charset(self, transport, stub_server):
        stub_server.respond(
            "/rest/latin",
            200,
            "café",
            headers={"Content-Type": "text/plain; charset=utf-8"},
        )

        response = transport.invoke(stub_server.address, "/rest/latin", "GET")

        assert response.body == "café"


class TestFailures:
    """Test construction and transport failures."""

    def test_unsupported_method_makes_no_call(self, transport, stub_server):
        with pytest.raises(NoSuchMethodError, match="No such method patch"):
            transport.invoke(stub_server.address, "/rest/bookings", "patch")

        assert stub_server.requests == []

    def test_invalid_host_makes_no_call(self, transport, stub_server):
        with pytest.raises(InvalidUriError, match="Wrong request URI"):
            transport.invoke("bad host", "/rest/bookings", "GET")

        assert stub_server.requests == []

    def test_invalid_parameters_make_no_call(self, transport, stub_server):
        with pytest.raises(InvalidParametersError):
            transport.invoke(
                stub_server.address,
                "/",
                "POST",
                {"json": {"body": "{}"}, "form": {"a": "1"}},
            )

        assert stub_server.requests == []

    def test_truncated_response(self, transport, stub_server):
        stub_server.respond("/rest/truncated", TRUNCATED)

        with pytest.raises(NetworkError) as exc_info:
            transport.invoke(stub_server.address, "/rest/truncated", "GET")

        error = exc_info.value
        assert error.message == "Network Error"
        assert error.kind is ErrorKind.TRANSPORT
        assert isinstance(error.cause, requests.exceptions.RequestException)
        assert error.__cause__ is error.cause

    def test_connection_closed_without_response(self, transport, stub_server):
        stub_server.respond("/rest/hangup", HANGUP)

        with pytest.raises(NetworkError):
            transport.invoke(stub_server.address, "/rest/hangup", "POST")

        assert len(stub_server.requests) == 1

    def test_connection_refused(self, transport, closed_address):
        with pytest.raises(NetworkError, match="Network Error"):
            transport.invoke(closed_address, "/", "GET")

    def test_read_timeout(self, silent_address):
        transport = HttpClientTransport(TransportConfig(timeout_connect=1.0, timeout_read=0.2))

        with pytest.raises(NetworkError) as exc_info:
            transport.invoke(silent_address, "/", "GET")

        assert isinstance(exc_info.value.cause, requests.exceptions.Timeout)

    def test_response_too_large(self, stub_server):
        stub_server.respond("/rest/big", 200, "x" * 64)
        transport = HttpClientTransport(TransportConfig(max_response_bytes=16))

        with pytest.raises(ResponseTooLargeError) as exc_info:
            transport.invoke(stub_server.address, "/rest/big", "GET")

        assert exc_info.value.kind is ErrorKind.TRANSPORT
        assert exc_info.value.limit == 16

    def test_response_within_limit(self, stub_server):
        stub_server.respond("/rest/small", 200, "x" * 16)
        transport = HttpClientTransport(TransportConfig(max_response_bytes=16))

        assert transport.invoke(stub_server.address, "/rest/small", "GET").body == "x" * 16


class TestOutcome:
    """Test the non-raising outcome API."""

    def test_success(self, transport, stub_server):
        stub_server.respond("/ok", 201, "created")

        result = transport.outcome(stub_server.address, "/ok", "POST")

        assert isinstance(result, SuccessfulSagaResponse)
        assert result.status_code == 201

    def test_remote_failure(self, transport, stub_server):
        stub_server.respond("/missing", 404, "not found")

        result = transport.outcome(stub_server.address, "/missing", "GET")

        assert isinstance(result, FailedSagaResponse)
        assert result.succeeded is False
        assert result.kind is ErrorKind.REMOTE
        assert "404" in result.message
        assert "not found" in result.message

    def test_routing_failure(self, transport, stub_server):
        result = transport.outcome(stub_server.address, "/", "PATCH")

        assert result == FailedSagaResponse(message="No such method PATCH", kind=ErrorKind.ROUTING)
        assert stub_server.requests == []

    def test_transport_failure_keeps_cause(self, transport, closed_address):
        result = transport.outcome(closed_address, "/", "GET")

        assert result.kind is ErrorKind.TRANSPORT
        assert isinstance(result.cause, requests.exceptions.ConnectionError)


class TestWithRequestsMock:
    """Test request shapes with requests-mock."""

    def test_json_body(self, transport):
        with Mocker() as m:
            m.post("http://booking.service:8080/rest/bookings", text="ok", status_code=200)

            response = transport.invoke(
                "booking.service:8080",
                "/rest/bookings",
                "POST",
                {"json": {"body": '{"x":1}'}},
            )

            assert response.body == "ok"
            assert m.last_request.body == b'{"x":1}'
            assert m.last_request.headers["Content-Type"] == "application/json"

    def test_query_parameters(self, transport):
        with Mocker() as m:
            m.get("http://booking.service/rest/bookings", text="[]")

            transport.invoke(
                "booking.service",
                "/rest/bookings",
                "GET",
                {"query": {"a": "1", "b": "2"}},
            )

            url = m.last_request.url
            assert "a=1" in url
            assert "b=2" in url

    def test_single_call_without_retry(self, transport):
        with Mocker() as m:
            m.get(
                "http://booking.service/rest/busy",
                status_code=503,
                reason="Service Unavailable",
                text="busy",
            )

            with pytest.raises(RemoteServiceError) as exc_info:
                transport.invoke("booking.service", "/rest/busy", "GET")

            assert m.call_count == 1
            assert exc_info.value.reason == "Service Unavailable"

    def test_connection_error(self, transport):
        with Mocker() as m:
            m.delete(
                "http://booking.service/rest/bookings/1",
                exc=requests.exceptions.ConnectTimeout,
            )

            with pytest.raises(NetworkError):
                transport.invoke("booking.service", "/rest/bookings/1", "DELETE")

    def test_external_session(self):
        session = requests.Session()
        transport = HttpClientTransport(session=session)

        assert transport.session is session

        with Mocker() as m:
            m.get("http://booking.service/", text="ok")
            assert transport.invoke("booking.service", "/", "GET").body == "ok"


class TestConcurrency:
    """Test concurrent use of one transport."""

    def test_concurrent_invocations(self, transport, stub_server):
        stub_server.respond("/rest/bookings", 200, "booked")

        def call(_):
            return transport.invoke(stub_server.address, "/rest/bookings", "GET").body

        with ThreadPoolExecutor(max_workers=8) as pool:
            bodies = list(pool.map(call, range(32)))

        assert bodies == ["booked"] * 32
        assert len(stub_server.requests) == 32

    def test_session_per_thread(self, transport):
        sessions = []

        def grab(_):
            sessions.append(transport.session)

        with ThreadPoolExecutor(max_workers=2) as pool:
            list(pool.map(grab, range(2)))

        assert transport.session is transport.session
        assert transport.session not in sessions

    def test_is_a_transport(self, transport):
        assert isinstance(transport, Transport)
