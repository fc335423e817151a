"""
Raw bytes converter.
"""

from typing import Any, Optional

from ..media_type import ALL, APPLICATION_OCTET_STREAM, MediaType
from ..transport.base import RequestSink
from .base import HttpMessageConverter, resolve_class


class ByteArrayHttpMessageConverter(HttpMessageConverter[bytes]):
    """Passes bytes and bytearray bodies through unchanged."""

    def __init__(self) -> None:
        super().__init__([APPLICATION_OCTET_STREAM, ALL])

    def supports(self, clazz: Any) -> bool:
        resolved = resolve_class(clazz)
        return resolved is not None and issubclass(resolved, (bytes, bytearray))

    def read(self, clazz: Any, data: bytes, media_type: Optional[MediaType]) -> bytes:
        if resolve_class(clazz) is bytearray:
            return bytearray(data)
        return bytes(data)

    def write(
        self,
        value: bytes,
        media_type: Optional[MediaType],
        sink: RequestSink,
        end_request: bool,
    ) -> None:
        self.write_payload(bytes(value), self.content_type_for(media_type), sink, end_request)
