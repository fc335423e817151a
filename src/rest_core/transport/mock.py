"""
Mock transport for testing.

MockTransport records every request opened through it and lets tests
drive the other side of the exchange by hand: deliver a response,
raise a transport failure, or fire a pending timer.
"""

from typing import Callable, List, Optional, Union

from ..http_primitives import Headers, HttpMethod, RawHeaders, Response
from .base import FailureCallback, RequestSink, ResponseCallback, TimerHandle, Transport


class MockTimerHandle(TimerHandle):
    """Timer that only fires when the test calls fire()."""

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self._callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        """Run the callback unless cancelled. Firing twice is allowed for tests."""
        if not self.cancelled:
            self._callback()


class MockRequestSink(RequestSink):
    """Records written chunks; response delivery is driven by the test."""

    def __init__(
        self,
        method: HttpMethod,
        uri: str,
        headers: Headers,
        on_response: ResponseCallback,
        on_failure: FailureCallback,
    ) -> None:
        self.method = method
        self.uri = uri
        self._headers = headers
        self._on_response = on_response
        self._on_failure = on_failure
        self.chunks: List[bytes] = []
        self._ended = False
        self.reset_cause: Optional[BaseException] = None

    @property
    def headers(self) -> Headers:
        return self._headers

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def body(self) -> bytes:
        return b"".join(self.chunks)

    def write(self, data: bytes) -> None:
        if self._ended:
            raise RuntimeError("Request already ended")
        self.chunks.append(data)

    def end(self, data: bytes = b"") -> None:
        self.write(data)
        self._ended = True

    def reset(self, cause: BaseException) -> None:
        self._ended = True
        self.reset_cause = cause

    def respond(
        self,
        status_code: int,
        body: Union[bytes, str] = b"",
        headers: Optional[RawHeaders] = None,
        reason: str = "",
        content_type: Optional[str] = None,
    ) -> None:
        """Deliver a response to the registered response callback."""
        if isinstance(body, str):
            body = body.encode("utf-8")
        raw_headers = list(headers or [])
        if content_type is not None:
            raw_headers.append((b"Content-Type", content_type.encode("latin-1")))
        self._on_response(
            Response(status_code=status_code, reason=reason, headers=raw_headers, body=body)
        )

    def fail(self, error: BaseException) -> None:
        """Deliver a transport failure to the registered failure callback."""
        self._on_failure(error)


class MockTransport(Transport):
    """Transport double that never touches the network."""

    def __init__(self) -> None:
        self.requests: List[MockRequestSink] = []
        self.timers: List[MockTimerHandle] = []

    def send_request(
        self,
        method: Union[str, HttpMethod],
        uri: str,
        headers: Headers,
        on_response: ResponseCallback,
        on_failure: FailureCallback,
    ) -> MockRequestSink:
        sink = MockRequestSink(HttpMethod.of(method), uri, headers, on_response, on_failure)
        self.requests.append(sink)
        return sink

    def call_later(self, delay: float, callback: Callable[[], None]) -> MockTimerHandle:
        timer = MockTimerHandle(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def last_request(self) -> MockRequestSink:
        return self.requests[-1]
