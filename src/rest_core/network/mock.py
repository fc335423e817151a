"""
Mock network implementations for testing.

This module provides in-memory NetworkStream and NetworkBackend
implementations so the h11 transport can be exercised without sockets.
"""

from typing import Any, Dict, List, Optional, Tuple

from .backend import NetworkBackend
from .stream import NetworkStream


class MockNetworkStream(NetworkStream):
    """
    In-memory network stream.

    Reads are served from a preloaded byte string; writes are recorded.
    """

    def __init__(self, data: bytes = b"", chunk_size: Optional[int] = None):
        self._data = data
        self._position = 0
        self._chunk_size = chunk_size
        self._closed = False
        self._extra_info: Dict[str, Any] = {}
        self._write_buffer: List[bytes] = []

    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        if self._closed:
            raise RuntimeError("Stream is closed")

        limit = min(filter(None, (max_bytes, self._chunk_size)), default=None)
        if limit is None:
            end = len(self._data)
        else:
            end = min(self._position + limit, len(self._data))

        result = self._data[self._position:end]
        self._position = end
        return result

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise RuntimeError("Stream is closed")
        self._write_buffer.append(data)

    async def aclose(self) -> None:
        self._closed = True

    def get_extra_info(self, name: str) -> Optional[Any]:
        return self._extra_info.get(name)

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def written_data(self) -> bytes:
        """Get all data that was written to the stream."""
        return b"".join(self._write_buffer)

    def set_extra_info(self, name: str, value: Any) -> None:
        self._extra_info[name] = value


class MockNetworkBackend(NetworkBackend):
    """
    Backend handing out MockNetworkStreams.

    Each connect_tcp() call creates a new stream preloaded with the
    response registered for (host, port), or raises the registered error.
    """

    def __init__(self) -> None:
        self._responses: Dict[Tuple[str, int], bytes] = {}
        self._errors: Dict[Tuple[str, int], BaseException] = {}
        self.streams: List[MockNetworkStream] = []

    def add_response(self, host: str, port: int, data: bytes) -> None:
        self._responses[(host, port)] = data

    def add_error(self, host: str, port: int, error: BaseException) -> None:
        self._errors[(host, port)] = error

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None
    ) -> MockNetworkStream:
        key = (host, port)
        if key in self._errors:
            raise self._errors[key]

        stream = MockNetworkStream(self._responses.get(key, b""))
        stream.set_extra_info("peername", key)
        stream.set_extra_info("sockname", ("127.0.0.1", 12345))
        self.streams.append(stream)
        return stream
