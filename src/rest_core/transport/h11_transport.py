"""
asyncio/h11 implementation of the Transport interface.

Each request sink buffers its body. When the body ends, the sink
schedules a task on the event loop that connects through the
NetworkBackend, runs one HTTP11Connection exchange and reports the
outcome through the registered callbacks.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Union

from ..exceptions import TimeoutError
from ..http11 import HTTP11Connection
from ..http_primitives import Headers, HttpMethod, Request, Response, URLComponents
from ..network.backend import NetworkBackend
from .base import FailureCallback, RequestSink, ResponseCallback, TimerHandle, Transport

logger = logging.getLogger(__name__)


class AsyncioTimerHandle(TimerHandle):
    """TimerHandle wrapping an asyncio.TimerHandle."""

    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()


class H11RequestSink(RequestSink):
    """Request sink that buffers the body and sends on end()."""

    def __init__(
        self,
        transport: "H11Transport",
        method: HttpMethod,
        url: URLComponents,
        headers: Headers,
        on_response: ResponseCallback,
        on_failure: FailureCallback,
    ) -> None:
        self._transport = transport
        self._method = method
        self._url = url
        self._headers = headers
        self._on_response = on_response
        self._on_failure = on_failure
        self._chunks: List[bytes] = []
        self._ended = False
        self._task: Optional[asyncio.Task] = None

    @property
    def headers(self) -> Headers:
        return self._headers

    @property
    def ended(self) -> bool:
        return self._ended

    def write(self, data: bytes) -> None:
        if self._ended:
            raise RuntimeError("Request already ended")
        if data:
            self._chunks.append(data)

    def end(self, data: bytes = b"") -> None:
        self.write(data)
        self._ended = True
        self._task = self._transport.loop.create_task(self._run(self._build_request()))

    def reset(self, cause: BaseException) -> None:
        self._ended = True
        if self._task is not None and not self._task.done():
            logger.debug(f"Resetting {self._method.value} {self._url.target}: {cause}")
            self._task.cancel()

    def _build_request(self) -> Request:
        body = b"".join(self._chunks)
        headers = self._headers
        if "Host" not in headers:
            default_port = 443 if self._url.scheme == "https" else 80
            host = self._url.host if self._url.port == default_port else f"{self._url.host}:{self._url.port}"
            headers.set("Host", host)
        if body or self._method in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH):
            headers.set("Content-Length", str(len(body)))
        return Request.create(self._method, self._url.target, headers.to_raw(), body)

    async def _run(self, request: Request) -> None:
        try:
            response = await self._transport.exchange(self._url, request)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.debug(f"{self._method.value} {self._url.target} failed: {e}")
            self._on_failure(e)
            return
        self._on_response(response)


class H11Transport(Transport):
    """
    HTTP/1.1 transport built on h11 and a NetworkBackend.

    Requests may be absolute URIs or paths relative to the configured
    host and port. Methods must be called from the event loop thread.
    """

    DEFAULT_PORT = 80
    DEFAULT_CONNECT_TIMEOUT = 10.0

    def __init__(
        self,
        backend: NetworkBackend,
        host: str,
        port: Optional[int] = None,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
        write_timeout: Optional[float] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """
        Initialize the transport.

        Args:
            backend: Network backend used to open connections
            host: Default host for relative URIs
            port: Default port for relative URIs
            connect_timeout: Timeout for establishing connections in seconds
            read_timeout: Timeout for each read in seconds
            write_timeout: Timeout for each write in seconds
            loop: Event loop; defaults to the running loop
        """
        self._backend = backend
        self._host = host
        self._port = port or self.DEFAULT_PORT
        self._connect_timeout = connect_timeout or self.DEFAULT_CONNECT_TIMEOUT
        self._read_timeout = read_timeout
        self._write_timeout = write_timeout
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def send_request(
        self,
        method: Union[str, HttpMethod],
        uri: str,
        headers: Headers,
        on_response: ResponseCallback,
        on_failure: FailureCallback,
    ) -> H11RequestSink:
        url = URLComponents.from_url(uri, default_host=self._host, default_port=self._port)
        return H11RequestSink(self, HttpMethod.of(method), url, headers, on_response, on_failure)

    def call_later(self, delay: float, callback: Callable[[], None]) -> AsyncioTimerHandle:
        return AsyncioTimerHandle(self.loop.call_later(delay, callback))

    async def exchange(self, url: URLComponents, request: Request) -> Response:
        """
        Open a connection, run one request/response cycle and close it.

        Raises:
            TimeoutError: If connecting, reading or writing times out
            ProtocolError: If the server violates HTTP/1.1
            OSError: If the connection fails
        """
        try:
            stream = await self._backend.connect_tcp(url.host, url.port, timeout=self._connect_timeout)
        except asyncio.TimeoutError as e:
            raise TimeoutError(f"Connecting to {url.host}:{url.port} timed out", self._connect_timeout) from e
        connection = HTTP11Connection(
            stream,
            read_timeout=self._read_timeout,
            write_timeout=self._write_timeout,
        )
        return await connection.handle_request(request)
