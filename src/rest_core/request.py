"""
Request/response pipeline for rest_core.

A RestClientRequest is the caller's handle on one exchange. The caller
configures headers, optionally writes a body, and ends the request.
The pipeline then negotiates a writer converter, hands the bytes to the
transport, waits for the response (or a failure, or the timeout),
negotiates a reader converter and delivers exactly one outcome.

State changes for one exchange happen on the transport's event loop
thread, so the state machine needs no locking. It does need to tolerate
late signals: the first terminal transition wins and everything after
it is discarded.
"""

import logging
from enum import Enum
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar, Union

from .config import RestClientOptions
from .converters.registry import ConverterRegistry
from .exceptions import (
    HttpClientError,
    HttpServerError,
    InvalidStateError,
    RestCoreError,
    TimeoutError,
    TransportError,
)
from .http_primitives import Headers, HttpMethod, Response, RestClientResponse
from .media_type import MediaType, to_header_value
from .transport.base import RequestSink, TimerHandle, Transport

T = TypeVar("T")

ResponseHandler = Callable[[RestClientResponse], None]
ExceptionHandler = Callable[[BaseException], None]

logger = logging.getLogger(__name__)


class ExchangeState(Enum):
    """States of an exchange."""
    CREATED = "created"                        # Handle issued, nothing written
    WRITING = "writing"                        # Body being serialized
    AWAITING_RESPONSE = "awaiting_response"    # Request ended, handed to the transport
    READING = "reading"                        # Response body being decoded
    COMPLETED = "completed"                    # Value delivered
    FAILED = "failed"                          # Error delivered

    @property
    def is_open(self) -> bool:
        """True while headers and body may still be written."""
        return self in (ExchangeState.CREATED, ExchangeState.WRITING)

    @property
    def is_terminal(self) -> bool:
        return self in (ExchangeState.COMPLETED, ExchangeState.FAILED)


class RestClientRequest(Generic[T]):
    """
    Handle on a single exchange.

    Header and body methods may be called until end(). The response
    handler receives a RestClientResponse on success; the exception
    handler receives the error on failure. Exactly one of them fires.
    """

    def __init__(
        self,
        transport: Transport,
        registry: ConverterRegistry,
        method: HttpMethod,
        uri: str,
        response_type: Any,
        response_handler: Optional[ResponseHandler],
        client_exception_handler: Optional[ExceptionHandler] = None,
        options: Optional[RestClientOptions] = None,
    ) -> None:
        """
        Initialize the request handle.

        Args:
            transport: Transport that carries the exchange
            registry: Converters used for negotiation
            method: HTTP method
            uri: Absolute URI or path relative to the transport's host
            response_type: Expected body type, or None for no body
            response_handler: Receives the RestClientResponse on success
            client_exception_handler: The client-wide last-resort handler
            options: Client options (timeout, global headers, default Content-Type)
        """
        options = options or RestClientOptions()

        self._transport = transport
        self._registry = registry
        self._method = method
        self._uri = uri
        self._response_type = response_type
        self._response_handler = response_handler
        self._client_exception_handler = client_exception_handler
        self._exception_handler: Optional[ExceptionHandler] = None

        self._headers = options.global_headers.copy()
        self._timeout = options.request_timeout
        self._default_content_type = options.default_content_type

        self._state = ExchangeState.CREATED
        self._sink: Optional[RequestSink] = None
        self._timer: Optional[TimerHandle] = None

    @property
    def state(self) -> ExchangeState:
        return self._state

    @property
    def method(self) -> HttpMethod:
        return self._method

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def headers(self) -> Headers:
        """Request headers; changes after end() have no effect."""
        return self._headers

    @property
    def response_type(self) -> Any:
        return self._response_type

    def put_header(self, name: str, value: str) -> "RestClientRequest[T]":
        self._check_open()
        self._headers.set(name, value)
        return self

    def set_content_type(self, media_type: Union[MediaType, str]) -> "RestClientRequest[T]":
        """
        Declare the request body media type.

        Raises:
            MalformedMediaTypeError: If media_type is an unparsable string
        """
        self._check_open()
        if isinstance(media_type, str):
            media_type = MediaType.parse(media_type)
        self._headers.set("Content-Type", media_type.to_header_value())
        return self

    def set_accept_header(self, media_types: Iterable[MediaType]) -> "RestClientRequest[T]":
        self._check_open()
        self._headers.set("Accept", to_header_value(media_types))
        return self

    def set_timeout(self, timeout: Optional[float]) -> "RestClientRequest[T]":
        """Set the response timeout in seconds; None or 0 disables it."""
        self._check_open()
        if timeout is not None and timeout < 0:
            raise ValueError("timeout must be non-negative")
        self._timeout = timeout
        return self

    def exception_handler(self, handler: Optional[ExceptionHandler]) -> "RestClientRequest[T]":
        """Set the handler for this exchange's failure; defaults to the client's."""
        self._exception_handler = handler
        return self

    def write(self, body: Any) -> "RestClientRequest[T]":
        """
        Write part of the request body without ending the request.

        Ignored once the exchange has completed or failed.

        Raises:
            InvalidStateError: If the request has already ended
        """
        if self._state.is_terminal:
            logger.debug(f"Ignoring write to {self._state.value} request {self}")
            return self
        self._check_open()
        self._write_body(body, end_request=False)
        return self

    def end(self, body: Any = None) -> None:
        """
        Finish the request, optionally writing a last body value.

        Ignored once the exchange has completed or failed, for example
        when the server answered before the body was finished.

        Raises:
            InvalidStateError: If the request has already ended
        """
        if self._state.is_terminal:
            logger.debug(f"Ignoring end of {self._state.value} request {self}")
            return
        self._check_open()
        if body is not None:
            self._write_body(body, end_request=True)
            return

        self._state = ExchangeState.WRITING
        sink = self._open_sink()
        self._prepare_end()
        sink.end(b"")
        self._after_end()

    def _check_open(self) -> None:
        if not self._state.is_open:
            raise InvalidStateError(
                f"Request {self._method.value} {self._uri} already {self._state.value}"
            )

    def _declared_content_type(self) -> Optional[MediaType]:
        value = self._headers.get("Content-Type")
        if value:
            return MediaType.parse(value)
        return self._default_content_type

    def _open_sink(self) -> RequestSink:
        if self._sink is None:
            logger.debug(f"Calling uri: {self._method.value} {self._uri}")
            self._sink = self._transport.send_request(
                self._method,
                self._uri,
                self._headers,
                self._on_response,
                self._on_failure,
            )
        return self._sink

    def _write_body(self, body: Any, end_request: bool) -> None:
        self._state = ExchangeState.WRITING
        try:
            content_type = self._declared_content_type()
            converter = self._registry.find_writer(type(body), content_type)
            sink = self._open_sink()
            if end_request:
                self._prepare_end()
            self._registry.write(converter, body, content_type, sink, end_request)
        except RestCoreError as e:
            self._fail(e)
            return
        if end_request:
            self._after_end()

    def _prepare_end(self) -> None:
        # Leaves the open states before the sink can answer synchronously
        self._state = ExchangeState.AWAITING_RESPONSE
        if self._response_type is not None and "Accept" not in self._headers:
            accept = self._registry.readable_media_types(self._response_type)
            if accept:
                self._headers.set("Accept", to_header_value(accept))

    def _after_end(self) -> None:
        # The transport may already have answered synchronously
        if self._state is not ExchangeState.AWAITING_RESPONSE:
            return
        if self._timeout:
            self._timer = self._transport.call_later(self._timeout, self._on_timeout)

    def _on_response(self, response: Response) -> None:
        if self._state.is_terminal:
            logger.warning(
                f"Discarding response {response.status_code} for {self}: "
                f"exchange already {self._state.value}"
            )
            return

        self._cancel_timer()
        self._state = ExchangeState.READING
        headers = Headers.from_raw(response.headers)
        logger.debug(f"Received {response.status_code} for {self}")

        try:
            body = self._read_body(response, headers)
        except RestCoreError as e:
            self._fail(e)
            return

        self._complete(RestClientResponse(
            status_code=response.status_code,
            status_message=response.reason,
            headers=headers,
            body=body,
        ))

    def _read_body(self, response: Response, headers: Headers) -> Any:
        status_code = response.status_code
        if 400 <= status_code < 500:
            raise HttpClientError(status_code, response.reason, headers, response.body, self._registry)
        if 500 <= status_code < 600:
            raise HttpServerError(status_code, response.reason, headers, response.body, self._registry)

        if self._response_type is None:
            return None

        value = headers.get("Content-Type")
        content_type = MediaType.parse(value) if value else None
        converter = self._registry.find_reader(self._response_type, content_type)
        if not response.body:
            return None
        return self._registry.read(converter, self._response_type, response.body, content_type)

    def _on_failure(self, error: BaseException) -> None:
        if self._state.is_terminal:
            logger.warning(f"Discarding failure for {self}: exchange already {self._state.value}: {error}")
            return

        if not isinstance(error, RestCoreError):
            error = TransportError(str(error) or type(error).__name__, cause=error)
        self._fail(error)

    def _on_timeout(self) -> None:
        self._timer = None
        if self._state.is_terminal:
            logger.debug(f"Ignoring timer for {self}: exchange already {self._state.value}")
            return

        error = TimeoutError(f"{self._method.value} {self._uri} did not complete", self._timeout)
        if self._sink is not None:
            self._sink.reset(error)
        self._fail(error)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fail(self, error: BaseException) -> None:
        self._state = ExchangeState.FAILED
        self._cancel_timer()
        if self._sink is not None and not self._sink.ended:
            self._sink.reset(error)

        handler = self._exception_handler or self._client_exception_handler
        if handler is None:
            logger.error(f"Unhandled failure of {self}: {error}")
            return
        try:
            handler(error)
        except Exception:
            logger.exception(f"Exception handler for {self} raised")

    def _complete(self, response: RestClientResponse) -> None:
        self._state = ExchangeState.COMPLETED
        if self._response_handler is None:
            return
        try:
            self._response_handler(response)
        except Exception as e:
            self._handle_uncaught(e)

    def _handle_uncaught(self, error: Exception) -> None:
        if self._client_exception_handler is None:
            logger.exception(f"Response handler for {self} raised")
            return
        try:
            self._client_exception_handler(error)
        except Exception:
            logger.exception(f"Client exception handler raised while handling {error!r}")

    def __str__(self) -> str:
        return f"{self._method.value} {self._uri}"

    def __repr__(self) -> str:
        return f"<RestClientRequest {self} [{self._state.value}]>"
