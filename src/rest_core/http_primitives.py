"""
HTTP primitives for rest_core.

This module defines the data structures passed between the client,
the exchange pipeline and the transport: headers, methods, wire-level
requests/responses and the typed response handed to callers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Generic,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Tuple,
    TypeVar,
    Union,
)
from urllib.parse import urlparse

T = TypeVar("T")

# Type aliases for better readability
RawHeaders = List[Tuple[bytes, bytes]]
StatusCode = int


class HttpMethod(str, Enum):
    """HTTP methods supported by the client."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def of(cls, method: Union[str, bytes, "HttpMethod"]) -> "HttpMethod":
        """Convert a str/bytes method name to HttpMethod."""
        if isinstance(method, HttpMethod):
            return method
        if isinstance(method, bytes):
            method = method.decode("ascii")
        return cls(method.upper())


class Headers:
    """
    Mutable, ordered, case-insensitive multi-valued header collection.

    Names keep the case they were added with; lookups ignore case.
    """

    def __init__(self, items: Optional[List[Tuple[str, str]]] = None) -> None:
        self._items: List[Tuple[str, str]] = []
        for name, value in items or []:
            self.add(name, value)

    @classmethod
    def from_raw(cls, raw: RawHeaders) -> "Headers":
        """Create Headers from a list of (name, value) byte tuples."""
        return cls([(name.decode("latin-1"), value.decode("latin-1")) for name, value in raw])

    def to_raw(self) -> RawHeaders:
        """Convert to a list of (name, value) byte tuples."""
        return [(name.encode("latin-1"), value.encode("latin-1")) for name, value in self._items]

    def add(self, name: str, value: str) -> "Headers":
        """Append a header, keeping existing values for the same name."""
        self._items.append((name, str(value)))
        return self

    def set(self, name: str, value: str) -> "Headers":
        """Replace all values for name with a single value."""
        self.remove(name)
        return self.add(name, value)

    def remove(self, name: str) -> "Headers":
        name_lower = name.lower()
        self._items = [item for item in self._items if item[0].lower() != name_lower]
        return self

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get the first value for name (case-insensitive)."""
        name_lower = name.lower()
        for header_name, header_value in self._items:
            if header_name.lower() == name_lower:
                return header_value
        return default

    def get_all(self, name: str) -> List[str]:
        name_lower = name.lower()
        return [value for header_name, value in self._items if header_name.lower() == name_lower]

    def copy(self) -> "Headers":
        return Headers(list(self._items))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"Headers({self._items!r})"


class URLComponents(NamedTuple):
    """Immutable representation of URL components."""
    scheme: str
    host: str
    port: int
    target: str

    @classmethod
    def from_url(cls, url: str, default_host: str = "", default_port: int = 80) -> "URLComponents":
        """
        Create URLComponents from an absolute URL or a bare path.

        A bare path (``/api/v1/users?q=1``) takes host and port from the
        defaults. The request target keeps the query string.
        """
        parsed = urlparse(url)
        scheme = parsed.scheme or "http"
        host = parsed.hostname or default_host
        port = parsed.port or (default_port if not parsed.hostname else (443 if scheme == "https" else 80))
        target = parsed.path or "/"
        if parsed.query:
            target = f"{target}?{parsed.query}"
        return cls(scheme=scheme, host=host, port=port, target=target)


@dataclass(frozen=True)
class Request:
    """
    Immutable wire-level HTTP request.

    The body is fully buffered; streaming request bodies are not
    supported by the transport.
    """

    method: bytes
    target: bytes
    headers: RawHeaders = field(default_factory=list)
    body: bytes = b""

    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if not isinstance(self.method, bytes):
            raise ValueError("method must be bytes")

        if not isinstance(self.target, bytes):
            raise ValueError("target must be bytes")

        if not isinstance(self.headers, list):
            raise ValueError("headers must be a list")

        for name, value in self.headers:
            if not isinstance(name, bytes) or not isinstance(value, bytes):
                raise ValueError("header names and values must be bytes")

    @classmethod
    def create(
        cls,
        method: Union[str, bytes, HttpMethod],
        target: Union[str, bytes],
        headers: Optional[RawHeaders] = None,
        body: bytes = b"",
    ) -> "Request":
        """Create a Request with proper type conversion."""
        if isinstance(method, HttpMethod):
            method = method.value
        if isinstance(method, str):
            method = method.encode()
        if isinstance(target, str):
            target = target.encode()
        return cls(method=method, target=target, headers=list(headers or []), body=body)


@dataclass(frozen=True)
class Response:
    """
    Immutable wire-level HTTP response with a fully buffered body.

    This is what a transport hands to the exchange pipeline.
    """

    status_code: StatusCode
    reason: str = ""
    headers: RawHeaders = field(default_factory=list)
    body: bytes = b""

    def __post_init__(self) -> None:
        """Validate response data after initialization."""
        if not isinstance(self.status_code, int):
            raise ValueError("status_code must be int")

        if not isinstance(self.headers, list):
            raise ValueError("headers must be a list")

        for name, value in self.headers:
            if not isinstance(name, bytes) or not isinstance(value, bytes):
                raise ValueError("header names and values must be bytes")

    def get_header(self, name: Union[str, bytes]) -> Optional[bytes]:
        """Get a header value by name (case-insensitive)."""
        if isinstance(name, str):
            name = name.encode()

        name_lower = name.lower()
        for header_name, header_value in self.headers:
            if header_name.lower() == name_lower:
                return header_value

        return None


@dataclass(frozen=True)
class RestClientResponse(Generic[T]):
    """Typed response delivered to a response handler."""

    status_code: StatusCode
    status_message: str
    headers: Headers
    body: Optional[T] = None
