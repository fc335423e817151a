"""
Plain text converter.
"""

from typing import Any, Optional

from ..exceptions import ConversionError
from ..media_type import ALL, TEXT_PLAIN, MediaType
from ..transport.base import RequestSink
from .base import HttpMessageConverter, resolve_class


class StringHttpMessageConverter(HttpMessageConverter[str]):
    """
    Reads and writes str bodies of any media type.

    Registered after structured converters, it serves as the fallback
    for text payloads.
    """

    def __init__(self) -> None:
        super().__init__([TEXT_PLAIN, ALL])

    @property
    def default_content_type(self) -> MediaType:
        return TEXT_PLAIN.with_charset(self.DEFAULT_CHARSET)

    def supports(self, clazz: Any) -> bool:
        resolved = resolve_class(clazz)
        return resolved is not None and issubclass(resolved, str)

    def read(self, clazz: Any, data: bytes, media_type: Optional[MediaType]) -> str:
        charset = self.resolve_charset(media_type)
        try:
            return data.decode(charset)
        except UnicodeDecodeError as e:
            raise ConversionError(f"cannot decode body as {charset}", cause=e) from e

    def write(
        self,
        value: str,
        media_type: Optional[MediaType],
        sink: RequestSink,
        end_request: bool,
    ) -> None:
        content_type = self.content_type_for(media_type)
        charset = self.resolve_charset(content_type)
        try:
            payload = value.encode(charset)
        except UnicodeEncodeError as e:
            raise ConversionError(f"cannot encode body as {charset}", cause=e) from e
        self.write_payload(payload, content_type, sink, end_request)
