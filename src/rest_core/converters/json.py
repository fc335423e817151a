"""
JSON converter backed by pydantic.

Any type pydantic can validate is supported: BaseModel subclasses,
dataclasses, TypedDicts, builtins and generic containers of those.
"""

import threading
from typing import Any, Dict, Optional

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from ..exceptions import ConversionError
from ..media_type import APPLICATION_JSON, APPLICATION_JSON_SUFFIX, MediaType
from ..transport.base import RequestSink
from .base import HttpMessageConverter


class JsonHttpMessageConverter(HttpMessageConverter[Any]):
    """Reads and writes ``application/json`` and ``application/*+json`` bodies."""

    def __init__(self, by_alias: bool = True, exclude_none: bool = False) -> None:
        """
        Args:
            by_alias: Serialize model fields by alias
            exclude_none: Drop None-valued fields when writing
        """
        super().__init__([APPLICATION_JSON, APPLICATION_JSON_SUFFIX])
        self._by_alias = by_alias
        self._exclude_none = exclude_none
        self._adapters: Dict[Any, TypeAdapter] = {}
        self._lock = threading.Lock()

    def supports(self, clazz: Any) -> bool:
        return clazz is not None

    def _adapter(self, clazz: Any) -> TypeAdapter:
        try:
            return self._adapters[clazz]
        except (KeyError, TypeError):
            pass
        adapter = TypeAdapter(clazz)
        try:
            with self._lock:
                self._adapters[clazz] = adapter
        except TypeError:
            # unhashable type argument, not cached
            pass
        return adapter

    def read(self, clazz: Any, data: bytes, media_type: Optional[MediaType]) -> Any:
        charset = self.resolve_charset(media_type)
        try:
            text = data.decode(charset)
            return self._adapter(clazz).validate_json(text)
        except UnicodeDecodeError as e:
            raise ConversionError(f"cannot decode JSON body as {charset}", cause=e) from e
        except ValidationError as e:
            type_name = getattr(clazz, "__name__", repr(clazz))
            raise ConversionError(f"cannot read JSON as {type_name}: {e}", cause=e) from e

    def write(
        self,
        value: Any,
        media_type: Optional[MediaType],
        sink: RequestSink,
        end_request: bool,
    ) -> None:
        content_type = self.content_type_for(media_type)
        charset = self.resolve_charset(content_type)
        try:
            text = self._adapter(type(value)).dump_json(
                value,
                by_alias=self._by_alias,
                exclude_none=self._exclude_none,
            ).decode("utf-8")
            payload = text.encode(charset)
        except (PydanticSerializationError, UnicodeEncodeError) as e:
            raise ConversionError(f"cannot write {type(value).__name__} as JSON: {e}", cause=e) from e
        self.write_payload(payload, content_type, sink, end_request)
