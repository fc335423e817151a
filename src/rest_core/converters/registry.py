"""
Converter registry for rest_core.

The registry holds an ordered list of converters and performs content
negotiation. Registration order is the tie-break: the first converter
whose capability check passes wins. Converters that accept any type
(JSON) go after the ones bound to a few classes (bytes, str, forms),
otherwise str and bytes values would be written as JSON strings.

The list is fixed at construction and only read afterwards, so one
registry can be shared by any number of concurrent exchanges.
"""

import logging
from typing import Any, Iterable, List, Optional, Tuple

from ..exceptions import ConversionError, NoConverterFoundError, RestCoreError
from ..media_type import MediaType, sort_by_specificity
from ..transport.base import RequestSink
from .base import HttpMessageConverter

logger = logging.getLogger(__name__)


class ConverterRegistry:
    """Ordered, read-only collection of converters."""

    def __init__(self, converters: Iterable[HttpMessageConverter]) -> None:
        self._converters: Tuple[HttpMessageConverter, ...] = tuple(converters)

    @property
    def converters(self) -> List[HttpMessageConverter]:
        return list(self._converters)

    def find_writer(self, value_type: Any, media_type: Optional[MediaType]) -> HttpMessageConverter:
        """
        Pick the converter that serializes value_type as media_type.

        A media type of None or ``*/*`` matches any converter able to
        write value_type.

        Raises:
            NoConverterFoundError: If no converter can write the pair
        """
        for converter in self._converters:
            if converter.can_write(value_type, media_type):
                logger.debug(f"Writing {_type_name(value_type)} as {media_type} with {converter!r}")
                return converter
        raise NoConverterFoundError(value_type, media_type, "write")

    def find_reader(self, value_type: Any, media_type: Optional[MediaType]) -> HttpMessageConverter:
        """
        Pick the converter that deserializes media_type into value_type.

        A media type of None matches any converter able to read value_type.

        Raises:
            NoConverterFoundError: If no converter can read the pair
        """
        for converter in self._converters:
            if converter.can_read(value_type, media_type):
                logger.debug(f"Reading {media_type} as {_type_name(value_type)} with {converter!r}")
                return converter
        raise NoConverterFoundError(value_type, media_type, "read")

    def write(
        self,
        converter: HttpMessageConverter,
        value: Any,
        media_type: Optional[MediaType],
        sink: RequestSink,
        end_request: bool,
    ) -> None:
        """
        Serialize value into sink with converter.

        Raises:
            ConversionError: If encoding fails
        """
        try:
            converter.write(value, media_type, sink, end_request)
        except RestCoreError:
            raise
        except Exception as e:
            raise ConversionError(f"{converter!r} failed to write: {e}", cause=e) from e

    def read(
        self,
        converter: HttpMessageConverter,
        target_type: Any,
        data: bytes,
        media_type: Optional[MediaType],
    ) -> Any:
        """
        Deserialize data into target_type with converter.

        Raises:
            ConversionError: If decoding fails
        """
        try:
            return converter.read(target_type, data, media_type)
        except RestCoreError:
            raise
        except Exception as e:
            raise ConversionError(f"{converter!r} failed to read: {e}", cause=e) from e

    def readable_media_types(self, value_type: Any) -> List[MediaType]:
        """Media types any converter can read into value_type, most specific first."""
        media_types: List[MediaType] = []
        for converter in self._converters:
            if converter.supports(value_type):
                for media_type in converter.supported_media_types:
                    if media_type not in media_types:
                        media_types.append(media_type)
        return sort_by_specificity(media_types)

    def __len__(self) -> int:
        return len(self._converters)

    def __repr__(self) -> str:
        return f"ConverterRegistry({list(self._converters)!r})"


def _type_name(value_type: Any) -> str:
    return getattr(value_type, "__name__", repr(value_type))
