"""
Message converter interface for rest_core.

A converter serializes a typed value into a request body and
deserializes a response body into a typed value, for the media
types it supports. The registry asks can_read()/can_write() to pick
one; read()/write() then do the actual work.
"""

import codecs
import logging
import types
import typing
from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, TypeVar

from ..exceptions import ConversionError
from ..media_type import ALL, MediaType
from ..transport.base import RequestSink

T = TypeVar("T")

logger = logging.getLogger(__name__)


def resolve_class(value_type: Any) -> Optional[type]:
    """
    Get the runtime class behind a type argument.

    Plain classes are returned as they are; generic aliases such as
    ``list[User]`` or ``Dict[str, int]`` resolve to their origin class.
    Anything else (``Any``, unions) resolves to None.
    """
    if value_type is typing.Any:
        return None
    origin = typing.get_origin(value_type)
    if origin is None:
        return value_type if isinstance(value_type, type) else None
    if origin is typing.Union or origin is getattr(types, "UnionType", None):
        return None
    return origin if isinstance(origin, type) else None


class HttpMessageConverter(ABC, Generic[T]):
    """
    Base class for body converters.

    Subclasses declare their media types and the classes they handle;
    the capability checks are shared.
    """

    DEFAULT_CHARSET = "utf-8"

    def __init__(self, supported_media_types: List[MediaType]) -> None:
        self._supported_media_types = list(supported_media_types)

    @property
    def supported_media_types(self) -> List[MediaType]:
        return list(self._supported_media_types)

    @property
    def default_content_type(self) -> MediaType:
        """Content-Type used when the caller declares none (or a wildcard)."""
        return self._supported_media_types[0]

    @abstractmethod
    def supports(self, clazz: Any) -> bool:
        """Check whether values of clazz can be handled at all."""
        pass

    def can_read(self, clazz: Any, media_type: Optional[MediaType]) -> bool:
        """
        Check whether a body of media_type can be read as clazz.

        A missing media type matches; some servers omit Content-Type.
        """
        if not self.supports(clazz):
            return False
        if media_type is None:
            return True
        return any(supported.includes(media_type) for supported in self._supported_media_types)

    def can_write(self, clazz: Any, media_type: Optional[MediaType]) -> bool:
        """Check whether a clazz value can be written as media_type."""
        if not self.supports(clazz):
            return False
        if media_type is None or media_type == ALL:
            return True
        return any(
            supported.is_compatible_with(media_type)
            for supported in self._supported_media_types
        )

    @abstractmethod
    def read(self, clazz: Any, data: bytes, media_type: Optional[MediaType]) -> T:
        """
        Decode data into an instance of clazz.

        Raises:
            ConversionError: If the body cannot be decoded
        """
        pass

    @abstractmethod
    def write(
        self,
        value: T,
        media_type: Optional[MediaType],
        sink: RequestSink,
        end_request: bool,
    ) -> None:
        """
        Encode value and hand the bytes to sink.

        Sets Content-Type and Content-Length on the sink, then either
        writes a partial chunk or ends the request.

        Raises:
            ConversionError: If the value cannot be encoded
        """
        pass

    def resolve_charset(self, media_type: Optional[MediaType]) -> str:
        """
        Pick the declared charset, or the converter default.

        Raises:
            ConversionError: If the charset is unknown
        """
        charset = media_type.charset if media_type is not None else None
        charset = charset or self.DEFAULT_CHARSET
        try:
            return codecs.lookup(charset).name
        except LookupError as e:
            raise ConversionError(f"unsupported charset {charset!r}", cause=e) from e

    def content_type_for(self, media_type: Optional[MediaType]) -> MediaType:
        """The Content-Type header to send for a declared media type."""
        if media_type is not None and media_type.is_concrete:
            return media_type
        return self.default_content_type

    def write_payload(
        self,
        payload: bytes,
        content_type: MediaType,
        sink: RequestSink,
        end_request: bool,
    ) -> None:
        """Set body headers on the sink and hand the payload over."""
        sink.headers.set("Content-Type", content_type.to_header_value())
        sink.headers.set("Content-Length", str(len(payload)))

        if end_request:
            logger.debug(f"Request body: {payload!r}")
            sink.end(payload)
        else:
            logger.debug(f"Partial request body: {payload!r}")
            sink.write(payload)

    def __repr__(self) -> str:
        names = ", ".join(str(media_type) for media_type in self._supported_media_types)
        return f"{type(self).__name__}([{names}])"
