"""
Tests for the HTTP/1.1 connection.

Responses are served by MockNetworkStream, so the h11 state machine
runs for real without sockets.
"""

import asyncio

import pytest

from rest_core.exceptions import InvalidStateError, ProtocolError, TimeoutError
from rest_core.http11 import ConnectionState, HTTP11Connection
from rest_core.http_primitives import Request
from rest_core.network.mock import MockNetworkStream


def make_request(method: str = "GET", target: str = "/users/u1", body: bytes = b"") -> Request:
    headers = [(b"Host", b"example.com")]
    if body:
        headers.append((b"Content-Length", str(len(body)).encode()))
    return Request.create(method, target, headers, body)


class StalledStream(MockNetworkStream):
    """Stream whose reads never complete."""

    async def read(self, max_bytes=None) -> bytes:
        await asyncio.sleep(3600)
        return b""


class TestHTTP11Connection:
    """Test HTTP/1.1 connection functionality."""

    @pytest.mark.asyncio
    async def test_simple_exchange(self) -> None:
        stream = MockNetworkStream(
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: application/json\r\n"
            b"Content-Length: 11\r\n"
            b"\r\n"
            b'{"id":"u1"}'
        )
        connection = HTTP11Connection(stream)

        response = await connection.handle_request(make_request())

        assert response.status_code == 200
        assert response.reason == "OK"
        assert response.get_header("content-type") == b"application/json"
        assert response.body == b'{"id":"u1"}'
        assert stream.written_data.startswith(b"GET /users/u1 HTTP/1.1\r\n")
        assert connection.is_closed
        assert stream.is_closed

    @pytest.mark.asyncio
    async def test_request_body_is_sent(self) -> None:
        stream = MockNetworkStream(b"HTTP/1.1 204 No Content\r\n\r\n")
        connection = HTTP11Connection(stream)

        response = await connection.handle_request(make_request("POST", "/users", b'{"id":"u1"}'))

        assert response.status_code == 204
        assert response.body == b""
        assert stream.written_data.endswith(b'\r\n\r\n{"id":"u1"}')

    @pytest.mark.asyncio
    async def test_chunked_body_in_small_reads(self) -> None:
        stream = MockNetworkStream(
            b"HTTP/1.1 200 OK\r\n"
            b"Transfer-Encoding: chunked\r\n"
            b"\r\n"
            b"5\r\nhello\r\n"
            b"6\r\n world\r\n"
            b"0\r\n\r\n",
            chunk_size=7,
        )
        response = await HTTP11Connection(stream).handle_request(make_request())
        assert response.body == b"hello world"

    @pytest.mark.asyncio
    async def test_informational_response_is_skipped(self) -> None:
        stream = MockNetworkStream(
            b"HTTP/1.1 100 Continue\r\n\r\n"
            b"HTTP/1.1 201 Created\r\nContent-Length: 2\r\n\r\nok"
        )
        response = await HTTP11Connection(stream).handle_request(make_request("POST", "/users", b"x"))
        assert response.status_code == 201
        assert response.body == b"ok"

    @pytest.mark.asyncio
    async def test_truncated_response(self) -> None:
        stream = MockNetworkStream(b"HTTP/1.1 200 OK\r\nContent-Length: 10\r\n\r\nshort")
        connection = HTTP11Connection(stream)
        with pytest.raises(ProtocolError):
            await connection.handle_request(make_request())
        assert connection.is_closed

    @pytest.mark.asyncio
    async def test_garbage_response(self) -> None:
        stream = MockNetworkStream(b"NOT HTTP AT ALL\r\n\r\n")
        with pytest.raises(ProtocolError):
            await HTTP11Connection(stream).handle_request(make_request())

    @pytest.mark.asyncio
    async def test_read_timeout(self) -> None:
        connection = HTTP11Connection(StalledStream(), read_timeout=0.01)
        with pytest.raises(TimeoutError):
            await connection.handle_request(make_request())
        assert connection.is_closed

    @pytest.mark.asyncio
    async def test_connection_is_single_use(self) -> None:
        stream = MockNetworkStream(b"HTTP/1.1 204 No Content\r\n\r\n")
        connection = HTTP11Connection(stream)
        await connection.handle_request(make_request())

        with pytest.raises(InvalidStateError):
            await connection.handle_request(make_request())

    @pytest.mark.asyncio
    async def test_metrics(self) -> None:
        data = b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\n\r\nok"
        stream = MockNetworkStream(data)
        connection = HTTP11Connection(stream)
        assert connection.metrics["state"] == ConnectionState.NEW.value

        await connection.handle_request(make_request())

        metrics = connection.metrics
        assert metrics["bytes_sent"] == len(stream.written_data)
        assert metrics["bytes_received"] == len(data)
        assert metrics["request_time"] >= 0
        assert metrics["state"] == "closed"
