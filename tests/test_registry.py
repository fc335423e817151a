"""
Unit tests for converter negotiation.
"""

import itertools
from typing import Any, Optional

import pytest

from rest_core.converters import (
    ByteArrayHttpMessageConverter,
    ConverterRegistry,
    FormHttpMessageConverter,
    HttpMessageConverter,
    JsonHttpMessageConverter,
    StringHttpMessageConverter,
    default_converters,
)
from rest_core.exceptions import ConversionError, NoConverterFoundError
from rest_core.http_primitives import Headers, HttpMethod
from rest_core.media_type import ALL, APPLICATION_JSON, TEXT_PLAIN, MediaType
from rest_core.transport.mock import MockRequestSink

from .conftest import User


class ExplodingConverter(HttpMessageConverter[Any]):
    """Converter whose codec fails with a non-library exception."""

    def __init__(self) -> None:
        super().__init__([TEXT_PLAIN])

    def supports(self, clazz: Any) -> bool:
        return True

    def read(self, clazz: Any, data: bytes, media_type: Optional[MediaType]) -> Any:
        raise KeyError("boom")

    def write(self, value, media_type, sink, end_request) -> None:
        raise ValueError("boom")


class TestFindWriter:
    """Test ConverterRegistry.find_writer()."""

    def test_first_match_in_registration_order(self) -> None:
        string = StringHttpMessageConverter()
        json = JsonHttpMessageConverter()
        assert ConverterRegistry([string, json]).find_writer(str, APPLICATION_JSON) is string
        assert ConverterRegistry([json, string]).find_writer(str, APPLICATION_JSON) is json

    def test_null_and_wildcard_match_any(self) -> None:
        form = FormHttpMessageConverter()
        registry = ConverterRegistry([StringHttpMessageConverter(), form])
        assert registry.find_writer(dict, None) is form
        assert registry.find_writer(dict, ALL) is form

    def test_declared_type_selects_converter(self) -> None:
        form = FormHttpMessageConverter()
        json = JsonHttpMessageConverter()
        registry = ConverterRegistry([form, json])
        assert registry.find_writer(dict, APPLICATION_JSON) is json
        assert registry.find_writer(dict, MediaType.parse("application/x-www-form-urlencoded")) is form

    def test_no_converter(self) -> None:
        registry = ConverterRegistry([FormHttpMessageConverter()])
        with pytest.raises(NoConverterFoundError) as exc_info:
            registry.find_writer(int, APPLICATION_JSON)
        assert exc_info.value.direction == "write"
        assert exc_info.value.value_type is int
        assert "int" in str(exc_info.value)

    def test_every_ordering_picks_first_capable(self) -> None:
        converters = default_converters()
        for ordering in itertools.permutations(converters):
            registry = ConverterRegistry(ordering)
            for value_type, media_type in [(str, None), (dict, None), (bytes, ALL), (User, APPLICATION_JSON)]:
                expected = next(c for c in ordering if c.can_write(value_type, media_type))
                assert registry.find_writer(value_type, media_type) is expected


class TestFindReader:
    """Test ConverterRegistry.find_reader()."""

    def test_concrete_media_type(self, registry) -> None:
        assert isinstance(registry.find_reader(User, APPLICATION_JSON), JsonHttpMessageConverter)
        assert isinstance(registry.find_reader(str, APPLICATION_JSON), StringHttpMessageConverter)

    def test_missing_content_type_is_tolerated(self, registry) -> None:
        assert isinstance(registry.find_reader(User, None), JsonHttpMessageConverter)

    def test_no_converter(self, registry) -> None:
        with pytest.raises(NoConverterFoundError) as exc_info:
            registry.find_reader(User, TEXT_PLAIN)
        assert exc_info.value.direction == "read"
        assert exc_info.value.media_type == TEXT_PLAIN


class TestReadWrite:
    """Test delegation and error wrapping."""

    def test_read_delegates(self, registry) -> None:
        converter = registry.find_reader(User, APPLICATION_JSON)
        assert registry.read(converter, User, b'{"id":"u1"}', APPLICATION_JSON) == User(id="u1")

    def test_read_wraps_foreign_errors(self) -> None:
        converter = ExplodingConverter()
        registry = ConverterRegistry([converter])
        with pytest.raises(ConversionError) as exc_info:
            registry.read(converter, str, b"x", None)
        assert isinstance(exc_info.value.cause, KeyError)

    def test_read_keeps_conversion_errors(self, registry) -> None:
        converter = registry.find_reader(User, APPLICATION_JSON)
        with pytest.raises(ConversionError) as exc_info:
            registry.read(converter, User, b"{}", APPLICATION_JSON)
        assert exc_info.value.cause is not None

    def test_write_wraps_foreign_errors(self) -> None:
        converter = ExplodingConverter()
        sink = MockRequestSink(HttpMethod.POST, "/", Headers(), print, print)
        with pytest.raises(ConversionError):
            ConverterRegistry([converter]).write(converter, "x", None, sink, True)
        assert not sink.ended


class TestReadableMediaTypes:
    """Test Accept header derivation."""

    def test_model(self, registry) -> None:
        assert [str(m) for m in registry.readable_media_types(User)] == [
            "application/json",
            "application/*+json",
        ]

    def test_string_includes_wildcard_last(self) -> None:
        registry = ConverterRegistry([StringHttpMessageConverter(), ByteArrayHttpMessageConverter()])
        media_types = registry.readable_media_types(str)
        assert media_types == [TEXT_PLAIN, ALL]

    def test_converters_property(self, registry, converters) -> None:
        assert registry.converters == converters
        assert len(registry) == 4
