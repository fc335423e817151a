"""
End-to-end tests for H11Transport.

RestClient and RxRestClient run over H11Transport and a
MockNetworkBackend, so the whole stack from converters to h11 is
exercised in-process.
"""

import asyncio

import pytest

from rest_core import (
    H11Transport,
    HttpClientError,
    RestClient,
    RestClientOptions,
    RxRestClient,
    TimeoutError,
    TransportError,
    default_converters,
)
from rest_core.network.mock import MockNetworkBackend

from .conftest import User


class StalledBackend(MockNetworkBackend):
    """Backend whose connections never open."""

    async def connect_tcp(self, host, port, timeout=None):
        await asyncio.sleep(3600)


@pytest.fixture
def backend():
    return MockNetworkBackend()


@pytest.fixture
def rx_client(backend):
    transport = H11Transport(backend, "api.example.com", 8080)
    return RxRestClient(RestClient(transport, default_converters()))


class TestH11Transport:
    """Test H11Transport functionality."""

    @pytest.mark.asyncio
    async def test_get_json(self, backend, rx_client) -> None:
        backend.add_response(
            "api.example.com",
            8080,
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: application/json\r\n"
            b"Content-Length: 11\r\n"
            b"\r\n"
            b'{"id":"u1"}',
        )

        response = await rx_client.get("/users/u1", User)

        assert response.status_code == 200
        assert response.body == User(id="u1")
        sent = backend.streams[0].written_data
        assert sent.startswith(b"GET /users/u1 HTTP/1.1\r\n")
        assert b"host: api.example.com:8080\r\n" in sent.lower()
        assert b"accept: application/json, application/*+json\r\n" in sent.lower()

    @pytest.mark.asyncio
    async def test_post_json_body(self, backend, rx_client) -> None:
        backend.add_response("api.example.com", 8080, b"HTTP/1.1 201 Created\r\nContent-Length: 0\r\n\r\n")

        def send_user(request) -> None:
            request.set_content_type("application/json")
            request.end(User(id="u2"))

        response = await rx_client.post("/users", None, send_user)

        assert response.status_code == 201
        assert response.body is None
        sent = backend.streams[0].written_data
        assert b"content-length: 11\r\n" in sent.lower()
        assert sent.endswith(b'{"id":"u2"}')

    @pytest.mark.asyncio
    async def test_absolute_uri(self, backend, rx_client) -> None:
        backend.add_response("other.example.com", 80, b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\n\r\nok")
        response = await rx_client.get("http://other.example.com/ping", str)
        assert response.body == "ok"
        assert b"host: other.example.com\r\n" in backend.streams[0].written_data.lower()

    @pytest.mark.asyncio
    async def test_client_error(self, backend, rx_client) -> None:
        backend.add_response(
            "api.example.com",
            8080,
            b"HTTP/1.1 404 Not Found\r\nContent-Type: text/plain\r\nContent-Length: 7\r\n\r\nmissing",
        )
        with pytest.raises(HttpClientError) as exc_info:
            await rx_client.get("/users/none", User)
        assert exc_info.value.status_code == 404
        assert exc_info.value.get_response_body(str) == "missing"

    @pytest.mark.asyncio
    async def test_connect_failure(self, backend, rx_client) -> None:
        backend.add_error("api.example.com", 8080, ConnectionRefusedError("refused"))
        with pytest.raises(TransportError) as exc_info:
            await rx_client.get("/users/u1", User)
        assert isinstance(exc_info.value.cause, ConnectionRefusedError)

    @pytest.mark.asyncio
    async def test_request_timeout(self) -> None:
        transport = H11Transport(StalledBackend(), "api.example.com", 8080)
        client = RestClient(transport, default_converters(), options=RestClientOptions(request_timeout=0.05))

        with pytest.raises(TimeoutError):
            await asyncio.wait_for(RxRestClient(client).get("/slow", User), timeout=5.0)
