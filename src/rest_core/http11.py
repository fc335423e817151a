"""
HTTP/1.1 connection implementation for rest_core.

This module implements the HTTP11Connection class that runs a single
HTTP/1.1 request/response cycle over a NetworkStream using h11. The
response body is buffered completely before it is returned, since
converters decode whole bodies only.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Dict, List, Optional

import h11

from .exceptions import InvalidStateError, ProtocolError, TimeoutError
from .http_primitives import Request, Response
from .network.stream import NetworkStream

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """States of an HTTP/1.1 connection."""
    NEW = "new"           # Connection created, not yet used
    ACTIVE = "active"     # Connection handling a request
    CLOSED = "closed"     # Connection closed, cannot be reused


class HTTP11Connection:
    """
    HTTP/1.1 connection.

    Sends one request and reads one complete response. Connections are
    not reused: after handle_request() the connection is closed.
    """

    # Default configuration
    DEFAULT_READ_TIMEOUT = 30.0  # 30 seconds
    DEFAULT_WRITE_TIMEOUT = 30.0  # 30 seconds
    READ_CHUNK_SIZE = 65536  # 64KB chunks

    def __init__(
        self,
        stream: NetworkStream,
        read_timeout: Optional[float] = None,
        write_timeout: Optional[float] = None,
    ):
        """
        Initialize HTTP/1.1 connection.

        Args:
            stream: The NetworkStream to use for communication
            read_timeout: Timeout for read operations in seconds
            write_timeout: Timeout for write operations in seconds
        """
        self._stream = stream
        self._h11_connection = h11.Connection(h11.CLIENT)
        self._state = ConnectionState.NEW

        self._read_timeout = read_timeout or self.DEFAULT_READ_TIMEOUT
        self._write_timeout = write_timeout or self.DEFAULT_WRITE_TIMEOUT

        # Metrics
        self._bytes_sent = 0
        self._bytes_received = 0
        self._request_time = 0.0

    async def handle_request(self, request: Request) -> Response:
        """
        Handle a complete HTTP request/response cycle.

        Args:
            request: The HTTP request to send

        Returns:
            The HTTP response with its body fully read

        Raises:
            InvalidStateError: If the connection was already used
            ProtocolError: If HTTP protocol error occurs
            TimeoutError: If a read or write times out
        """
        if self._state != ConnectionState.NEW:
            raise InvalidStateError(f"Connection is {self._state.value}")
        self._state = ConnectionState.ACTIVE

        start_time = time.time()
        try:
            await self._send_request(request)
            response = await self._receive_response()
        except asyncio.TimeoutError as e:
            logger.debug(f"{request.method!r} {request.target!r} timed out")
            raise TimeoutError("HTTP/1.1 exchange timed out") from e
        except h11.ProtocolError as e:
            raise ProtocolError(str(e), cause=e) from e
        finally:
            self._request_time = time.time() - start_time
            await self.close()

        logger.debug(
            f"{request.method!r} {request.target!r} -> {response.status_code} "
            f"({self._request_time:.3f}s)"
        )
        return response

    async def _send_request(self, request: Request) -> None:
        """Send request headers, body and end of message."""
        await self._send_event(
            h11.Request(method=request.method, target=request.target, headers=request.headers)
        )
        if request.body:
            await self._send_event(h11.Data(data=request.body))
        await self._send_event(h11.EndOfMessage())

    async def _send_event(self, event: Any) -> None:
        """Send an h11 event to the network stream."""
        data = self._h11_connection.send(event)
        if data:
            await asyncio.wait_for(self._stream.write(data), timeout=self._write_timeout)
            self._bytes_sent += len(data)

    async def _next_event(self) -> Any:
        """Get the next h11 event, reading from the network as needed."""
        while True:
            event = self._h11_connection.next_event()

            if event is h11.NEED_DATA:
                data = await asyncio.wait_for(
                    self._stream.read(self.READ_CHUNK_SIZE),
                    timeout=self._read_timeout,
                )
                self._h11_connection.receive_data(data)
                self._bytes_received += len(data)
                continue

            if isinstance(event, h11.ConnectionClosed):
                raise ProtocolError("Connection closed by server")

            return event

    async def _receive_response(self) -> Response:
        """Receive the response head and buffer the whole body."""
        while True:
            event = await self._next_event()
            # Informational 1xx responses precede the final one
            if isinstance(event, h11.Response):
                break

        chunks: List[bytes] = []
        while True:
            body_event = await self._next_event()
            if isinstance(body_event, h11.Data):
                chunks.append(bytes(body_event.data))
            elif isinstance(body_event, h11.EndOfMessage):
                break

        return Response(
            status_code=event.status_code,
            reason=event.reason.decode("latin-1"),
            headers=[(bytes(name), bytes(value)) for name, value in event.headers],
            body=b"".join(chunks),
        )

    async def close(self) -> None:
        """Close the connection and cleanup resources."""
        if self._state != ConnectionState.CLOSED:
            self._state = ConnectionState.CLOSED
            await self._stream.aclose()

    @property
    def is_closed(self) -> bool:
        """Check if connection is closed."""
        return self._state == ConnectionState.CLOSED

    @property
    def metrics(self) -> Dict[str, Any]:
        """Get connection metrics."""
        return {
            "bytes_sent": self._bytes_sent,
            "bytes_received": self._bytes_received,
            "request_time": self._request_time,
            "state": self._state.value,
        }
