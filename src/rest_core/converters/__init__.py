"""
Body converters and content negotiation for rest_core.
"""

from .base import HttpMessageConverter, resolve_class
from .byte_array import ByteArrayHttpMessageConverter
from .form import Form, FormHttpMessageConverter
from .json import JsonHttpMessageConverter
from .registry import ConverterRegistry
from .string import StringHttpMessageConverter


def default_converters() -> list:
    """
    The default converter order.

    Raw types come first so that str and bytes are never routed through
    JSON; JSON comes last because it accepts any type.
    """
    return [
        ByteArrayHttpMessageConverter(),
        StringHttpMessageConverter(),
        FormHttpMessageConverter(),
        JsonHttpMessageConverter(),
    ]


__all__ = [
    "HttpMessageConverter",
    "ConverterRegistry",
    "FormHttpMessageConverter",
    "StringHttpMessageConverter",
    "ByteArrayHttpMessageConverter",
    "JsonHttpMessageConverter",
    "Form",
    "default_converters",
    "resolve_class",
]
