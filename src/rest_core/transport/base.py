"""
Transport interface for rest_core.

The transport is the external collaborator that moves bytes. The
exchange pipeline only needs to open a request, write its body, and
be told once about the response or a failure. It also needs the
transport's event loop to arm timeout timers.
"""

from abc import ABC, abstractmethod
from typing import Callable, Union

from ..http_primitives import Headers, HttpMethod, Response

ResponseCallback = Callable[[Response], None]
FailureCallback = Callable[[BaseException], None]


class TimerHandle(ABC):
    """Handle for a timer registered with Transport.call_later()."""

    @abstractmethod
    def cancel(self) -> None:
        """Cancel the timer. Cancelling a fired timer is a no-op."""
        pass


class RequestSink(ABC):
    """
    Outgoing side of one request.

    Headers may be changed until the first write() or end(). After
    end() the sink hands the request to the wire. The response or
    failure callback given to Transport.send_request() fires once.
    """

    @property
    @abstractmethod
    def headers(self) -> Headers:
        """Mutable request headers."""
        pass

    @abstractmethod
    def write(self, data: bytes) -> None:
        """
        Write a chunk of the request body.

        Raises:
            RuntimeError: If the sink has already ended.
        """
        pass

    @abstractmethod
    def end(self, data: bytes = b"") -> None:
        """
        Write the final chunk of the request body and send the request.

        Raises:
            RuntimeError: If the sink has already ended.
        """
        pass

    @abstractmethod
    def reset(self, cause: BaseException) -> None:
        """Abort the request. No callback fires after a reset."""
        pass

    @property
    @abstractmethod
    def ended(self) -> bool:
        pass


class Transport(ABC):
    """
    Interface for transport implementations.

    Callbacks are invoked on the transport's event loop thread.
    """

    @abstractmethod
    def send_request(
        self,
        method: Union[str, HttpMethod],
        uri: str,
        headers: Headers,
        on_response: ResponseCallback,
        on_failure: FailureCallback,
    ) -> RequestSink:
        """
        Open a request.

        Args:
            method: The HTTP method
            uri: Absolute URI or path relative to the transport's host
            headers: Initial request headers; the sink owns this object
            on_response: Called once with the fully buffered response
            on_failure: Called once on connection refused, reset, DNS failure

        Returns:
            The sink for the request body.
        """
        pass

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback after delay seconds on the transport's event loop."""
        pass
