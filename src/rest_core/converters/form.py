"""
Form converter for ``application/x-www-form-urlencoded`` bodies.

Forms are multi-valued: each name maps to a list of values. A value
of None is written as a bare name (``b`` rather than ``b=``), and a
bare name reads back as ``[None]``.
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote_plus, unquote_plus

from ..exceptions import ConversionError
from ..media_type import APPLICATION_FORM_URLENCODED, MediaType
from ..transport.base import RequestSink
from .base import HttpMessageConverter, resolve_class

Form = Dict[str, List[Optional[str]]]


class FormHttpMessageConverter(HttpMessageConverter[Form]):
    """Reads and writes mappings as URL-encoded forms."""

    def __init__(self) -> None:
        super().__init__([APPLICATION_FORM_URLENCODED])

    def supports(self, clazz: Any) -> bool:
        resolved = resolve_class(clazz)
        return resolved is not None and issubclass(resolved, Mapping)

    def read(self, clazz: Any, data: bytes, media_type: Optional[MediaType]) -> Form:
        charset = self.resolve_charset(media_type)
        try:
            body = data.decode(charset)
            result: Form = {}
            if not body:
                return result
            for pair in body.split("&"):
                name, eq, value = pair.partition("=")
                decoded_name = unquote_plus(name, encoding=charset, errors="strict")
                decoded_value = unquote_plus(value, encoding=charset, errors="strict") if eq else None
                result.setdefault(decoded_name, []).append(decoded_value)
            return result
        except UnicodeDecodeError as e:
            raise ConversionError(f"cannot decode form body as {charset}", cause=e) from e

    def write(
        self,
        value: Mapping,
        media_type: Optional[MediaType],
        sink: RequestSink,
        end_request: bool,
    ) -> None:
        charset = self.resolve_charset(media_type)
        try:
            payload = self.encode_form(value, charset)
            data = payload.encode(charset)
        except UnicodeEncodeError as e:
            raise ConversionError(f"cannot encode form body as {charset}", cause=e) from e
        self.write_payload(data, self.content_type_for(media_type), sink, end_request)

    @staticmethod
    def encode_form(form: Mapping, charset: str) -> str:
        """Encode a form mapping as ``name=value`` pairs joined by ``&``."""
        pairs = []
        for name, values in form.items():
            for value in _as_values(values):
                encoded_name = quote_plus(str(name), encoding=charset)
                if value is None:
                    pairs.append(encoded_name)
                else:
                    pairs.append(f"{encoded_name}={quote_plus(str(value), encoding=charset)}")
        return "&".join(pairs)


def _as_values(values: Any) -> Iterable[Any]:
    if isinstance(values, (list, tuple)):
        return values
    return [values]
