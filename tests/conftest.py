"""
Pytest configuration for rest_core tests.

This file contains shared fixtures and configuration
for all tests in the project.
"""

from typing import Any, List

import pytest
from pydantic import BaseModel

from rest_core.client import RestClient
from rest_core.converters import (
    ByteArrayHttpMessageConverter,
    ConverterRegistry,
    FormHttpMessageConverter,
    JsonHttpMessageConverter,
    StringHttpMessageConverter,
)
from rest_core.http_primitives import Headers
from rest_core.transport.mock import MockTransport


class User(BaseModel):
    """Response model used across tests."""
    id: str


class ErrorPayload(BaseModel):
    """Error body model used across tests."""
    code: str
    message: str


class Recorder:
    """Collects handler invocations."""

    def __init__(self) -> None:
        self.calls: List[Any] = []

    def __call__(self, value: Any) -> None:
        self.calls.append(value)

    @property
    def last(self) -> Any:
        return self.calls[-1]


@pytest.fixture
def mock_transport():
    """Create a transport double."""
    return MockTransport()


@pytest.fixture
def converters():
    """Converters in the order used by most tests."""
    return [
        FormHttpMessageConverter(),
        StringHttpMessageConverter(),
        JsonHttpMessageConverter(),
        ByteArrayHttpMessageConverter(),
    ]


@pytest.fixture
def registry(converters):
    return ConverterRegistry(converters)


@pytest.fixture
def client_errors():
    """Recorder for the client-wide exception handler."""
    return Recorder()


@pytest.fixture
def client(mock_transport, registry, client_errors):
    """RestClient over the mock transport."""
    return RestClient(mock_transport, registry, exception_handler=client_errors)


@pytest.fixture
def recorder():
    """Create a fresh handler recorder."""
    def _create() -> Recorder:
        return Recorder()
    return _create


@pytest.fixture
def json_headers():
    """Raw response headers for a JSON body."""
    return [(b"Content-Type", b"application/json;charset=UTF-8")]


@pytest.fixture
def sample_headers():
    """Sample request headers for testing."""
    return Headers([
        ("Content-Type", "application/json"),
        ("Authorization", "Bearer token123"),
        ("User-Agent", "rest_core/0.1.0"),
        ("Accept", "*/*"),
    ])
