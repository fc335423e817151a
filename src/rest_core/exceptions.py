"""
Custom exceptions for rest_core.

This module defines the exception hierarchy used throughout
the library. Every failure of an exchange is delivered to the
caller as exactly one of these classes.
"""

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .converters.registry import ConverterRegistry
    from .http_primitives import Headers
    from .media_type import MediaType


class RestCoreError(Exception):
    """Base exception for all rest_core errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class MalformedMediaTypeError(RestCoreError):
    """Raised when a Content-Type or Accept value cannot be parsed."""

    def __init__(self, value: str, reason: str) -> None:
        super().__init__(f"Media type error: invalid media type {value!r}: {reason}")
        self.value = value
        self.reason = reason


class NoConverterFoundError(RestCoreError):
    """Raised when no registered converter handles a type/media type pair."""

    def __init__(
        self,
        value_type: Any,
        media_type: Optional["MediaType"],
        direction: str,
    ) -> None:
        type_name = getattr(value_type, "__name__", repr(value_type))
        media = str(media_type) if media_type is not None else "any media type"
        super().__init__(
            f"Converter error: no converter found to {direction} {type_name} as {media}"
        )
        self.value_type = value_type
        self.media_type = media_type
        self.direction = direction


class ConversionError(RestCoreError):
    """Raised when a converter fails to encode or decode a body."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Conversion error: {message}", cause)


class HttpStatusCodeError(RestCoreError):
    """
    Raised when the server answers with a 4xx or 5xx status.

    The raw body is kept undecoded. Callers that know the shape of
    the error payload can decode it on demand with get_response_body(),
    which negotiates a converter the same way a successful response does.
    """

    def __init__(
        self,
        status_code: int,
        status_message: str,
        headers: "Headers",
        body: bytes,
        registry: "ConverterRegistry",
    ) -> None:
        super().__init__(f"HTTP error: {status_code} {status_message}".rstrip())
        self.status_code = status_code
        self.status_message = status_message
        self.headers = headers
        self.body = body
        self._registry = registry

    @property
    def converters(self) -> list:
        """The converters available for decoding the error body."""
        return self._registry.converters

    def response_body_as_string(self, charset: Optional[str] = None) -> str:
        """Decode the raw body as text, using the response charset if none is given."""
        if charset is None:
            content_type = self._content_type()
            charset = content_type.charset if content_type is not None else None
        return self.body.decode(charset or "utf-8", errors="replace")

    def get_response_body(self, response_type: Any) -> Any:
        """
        Decode the raw error body into response_type.

        Raises:
            MalformedMediaTypeError: If the response Content-Type is invalid
            NoConverterFoundError: If no converter can read the body
            ConversionError: If decoding fails
        """
        content_type = self._content_type()
        converter = self._registry.find_reader(response_type, content_type)
        return self._registry.read(converter, response_type, self.body, content_type)

    def _content_type(self) -> Optional["MediaType"]:
        from .media_type import MediaType

        value = self.headers.get("Content-Type")
        return MediaType.parse(value) if value else None


class HttpClientError(HttpStatusCodeError):
    """Raised when an HTTP 4xx is received."""


class HttpServerError(HttpStatusCodeError):
    """Raised when an HTTP 5xx is received."""


class TransportError(RestCoreError):
    """Raised when the underlying transport fails (refused, reset, DNS)."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Transport error: {message}", cause)


class ProtocolError(TransportError):
    """Raised when there's an error with HTTP protocol handling."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        RestCoreError.__init__(self, f"Protocol error: {message}", cause)


class TimeoutError(TransportError):
    """Raised when an exchange does not complete within its timeout."""

    def __init__(self, message: str, timeout: Optional[float] = None) -> None:
        if timeout is not None:
            message = f"{message} (timeout: {timeout}s)"
        RestCoreError.__init__(self, f"Timeout error: {message}")
        self.timeout = timeout


class InvalidStateError(RestCoreError):
    """Raised when an object is used in a way its current state forbids."""


class MultipleSubscriptionError(InvalidStateError):
    """Raised when a second live subscriber attaches to a single-value bridge."""

    def __init__(self) -> None:
        super().__init__("Cannot have multiple subscriptions")
