"""
Unit tests for the body converters.
"""

from dataclasses import dataclass
from typing import Dict, List

import pytest

from rest_core.converters import (
    ByteArrayHttpMessageConverter,
    FormHttpMessageConverter,
    JsonHttpMessageConverter,
    StringHttpMessageConverter,
    resolve_class,
)
from rest_core.exceptions import ConversionError
from rest_core.http_primitives import Headers, HttpMethod
from rest_core.media_type import ALL, APPLICATION_FORM_URLENCODED, APPLICATION_JSON, MediaType
from rest_core.transport.mock import MockRequestSink

from .conftest import User


@pytest.fixture
def sink():
    """A request sink that only records writes."""
    def _unexpected(_):
        raise AssertionError("no callback expected")
    return MockRequestSink(HttpMethod.POST, "/", Headers(), _unexpected, _unexpected)


class TestResolveClass:
    """Test resolve_class()."""

    def test_plain_and_generic(self) -> None:
        assert resolve_class(dict) is dict
        assert resolve_class(List[User]) is list
        assert resolve_class(Dict[str, int]) is dict
        assert resolve_class(list[int]) is list

    def test_unresolvable(self) -> None:
        from typing import Any, Union
        assert resolve_class(Any) is None
        assert resolve_class(Union[int, str]) is None


class TestFormHttpMessageConverter:
    """Test the URL-encoded form converter."""

    def test_capabilities(self) -> None:
        converter = FormHttpMessageConverter()
        assert converter.can_write(dict, None)
        assert converter.can_write(dict, ALL)
        assert converter.can_write(dict, MediaType.parse("application/*"))
        assert not converter.can_write(dict, APPLICATION_JSON)
        assert not converter.can_write(str, APPLICATION_FORM_URLENCODED)
        assert converter.can_read(Dict[str, List[str]], APPLICATION_FORM_URLENCODED)
        assert converter.can_read(dict, None)
        assert not converter.can_read(dict, MediaType.parse("application/*"))

    def test_write_multi_valued_with_null(self, sink) -> None:
        converter = FormHttpMessageConverter()
        converter.write({"a": ["1", "2"], "b": [None]}, None, sink, end_request=True)

        assert sink.body == b"a=1&a=2&b"
        assert sink.ended
        assert sink.headers.get("Content-Type") == "application/x-www-form-urlencoded"
        assert sink.headers.get("Content-Length") == "9"

    def test_write_null_in_middle(self, sink) -> None:
        FormHttpMessageConverter().write({"a": [None, "x"], "b": "y"}, None, sink, True)
        assert sink.body == b"a&a=x&b=y"

    def test_write_percent_encodes(self, sink) -> None:
        FormHttpMessageConverter().write({"name & co": "a=b ø"}, None, sink, True)
        assert sink.body == b"name+%26+co=a%3Db+%C3%B8"

    def test_write_declared_charset(self, sink) -> None:
        media_type = MediaType.parse("application/x-www-form-urlencoded; charset=ISO-8859-1")
        FormHttpMessageConverter().write({"k": "ø"}, media_type, sink, True)
        assert sink.body == b"k=%F8"
        assert sink.headers.get("Content-Type") == "application/x-www-form-urlencoded; charset=ISO-8859-1"

    def test_partial_write(self, sink) -> None:
        FormHttpMessageConverter().write({"a": "1"}, None, sink, end_request=False)
        assert sink.body == b"a=1"
        assert not sink.ended

    def test_read(self) -> None:
        form = FormHttpMessageConverter().read(dict, b"a=1&a=2&b&c=x+y%21", None)
        assert form == {"a": ["1", "2"], "b": [None], "c": ["x y!"]}
        assert list(form) == ["a", "b", "c"]

    def test_read_empty(self) -> None:
        assert FormHttpMessageConverter().read(dict, b"", None) == {}

    def test_read_invalid_encoding(self) -> None:
        with pytest.raises(ConversionError):
            FormHttpMessageConverter().read(dict, b"a=%FF", None)

    def test_round_trip(self, sink) -> None:
        converter = FormHttpMessageConverter()
        form = {"name": ["Jürgen", "x&y"], "empty": [""], "flag": [None], "n": ["1"]}
        converter.write(form, None, sink, True)
        assert converter.read(dict, sink.body, None) == form


class TestStringHttpMessageConverter:
    """Test the plain text converter."""

    def test_capabilities(self) -> None:
        converter = StringHttpMessageConverter()
        assert converter.can_read(str, MediaType.parse("text/html"))
        assert converter.can_read(str, APPLICATION_JSON)
        assert converter.can_write(str, APPLICATION_JSON)
        assert not converter.can_read(bytes, None)

    def test_write_default_content_type(self, sink) -> None:
        StringHttpMessageConverter().write("héllo", None, sink, True)
        assert sink.body == "héllo".encode("utf-8")
        assert sink.headers.get("Content-Type") == "text/plain; charset=utf-8"
        assert sink.headers.get("Content-Length") == "6"

    def test_write_declared_charset(self, sink) -> None:
        media_type = MediaType.parse("text/plain; charset=latin-1")
        StringHttpMessageConverter().write("é", media_type, sink, True)
        assert sink.body == b"\xe9"

    def test_read_charset(self) -> None:
        converter = StringHttpMessageConverter()
        assert converter.read(str, b"\xe9", MediaType.parse("text/plain; charset=ISO-8859-1")) == "é"
        assert converter.read(str, "é".encode(), None) == "é"

    def test_read_invalid(self) -> None:
        with pytest.raises(ConversionError):
            StringHttpMessageConverter().read(str, b"\xff\xfe\xfa", None)

    def test_unknown_charset(self) -> None:
        with pytest.raises(ConversionError, match="unsupported charset"):
            StringHttpMessageConverter().read(str, b"x", MediaType.parse("text/plain; charset=nope"))


class TestByteArrayHttpMessageConverter:
    """Test the bytes converter."""

    def test_pass_through(self, sink) -> None:
        converter = ByteArrayHttpMessageConverter()
        assert converter.can_read(bytes, MediaType.parse("image/png"))
        assert converter.read(bytes, b"\x00\x01", None) == b"\x00\x01"
        assert isinstance(converter.read(bytearray, b"\x00", None), bytearray)

        converter.write(b"\x00\x01", None, sink, True)
        assert sink.body == b"\x00\x01"
        assert sink.headers.get("Content-Type") == "application/octet-stream"


@dataclass
class Point:
    x: int
    y: int


class TestJsonHttpMessageConverter:
    """Test the pydantic-backed JSON converter."""

    def test_capabilities(self) -> None:
        converter = JsonHttpMessageConverter()
        assert converter.can_read(User, APPLICATION_JSON)
        assert converter.can_read(User, MediaType.parse("application/hal+json"))
        assert not converter.can_read(User, MediaType.parse("text/plain"))
        assert converter.can_write(User, None)

    def test_read_model(self) -> None:
        user = JsonHttpMessageConverter().read(User, b'{"id":"u1"}', APPLICATION_JSON)
        assert user == User(id="u1")

    def test_read_generic_list(self) -> None:
        users = JsonHttpMessageConverter().read(List[User], b'[{"id":"a"},{"id":"b"}]', None)
        assert [user.id for user in users] == ["a", "b"]

    def test_read_dataclass(self) -> None:
        assert JsonHttpMessageConverter().read(Point, b'{"x":1,"y":2}', None) == Point(1, 2)

    def test_read_invalid(self) -> None:
        converter = JsonHttpMessageConverter()
        with pytest.raises(ConversionError):
            converter.read(User, b'{"name":"missing id"}', None)
        with pytest.raises(ConversionError):
            converter.read(User, b"not json", None)

    def test_write_model(self, sink) -> None:
        JsonHttpMessageConverter().write(User(id="u1"), None, sink, True)
        assert sink.body == b'{"id":"u1"}'
        assert sink.headers.get("Content-Type") == "application/json"
        assert sink.headers.get("Content-Length") == "11"

    def test_write_declared_media_type(self, sink) -> None:
        media_type = MediaType.parse("application/vnd.api+json")
        JsonHttpMessageConverter().write({"a": 1}, media_type, sink, True)
        assert sink.body == b'{"a":1}'
        assert sink.headers.get("Content-Type") == "application/vnd.api+json"

    def test_write_wildcard_uses_default(self, sink) -> None:
        JsonHttpMessageConverter().write([1, 2], MediaType.parse("application/*+json"), sink, True)
        assert sink.headers.get("Content-Type") == "application/json"
