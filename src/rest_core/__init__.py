"""
rest_core - Content-negotiating REST client

A callback-driven HTTP client that negotiates body converters from
media types, with a single-value reactive facade on top.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

# Import main components for easy access
from .client import RestClient
from .config import RestClientOptions
from .converters import (
    ByteArrayHttpMessageConverter,
    ConverterRegistry,
    FormHttpMessageConverter,
    HttpMessageConverter,
    JsonHttpMessageConverter,
    StringHttpMessageConverter,
    default_converters,
)
from .exceptions import (
    ConversionError,
    HttpClientError,
    HttpServerError,
    HttpStatusCodeError,
    InvalidStateError,
    MalformedMediaTypeError,
    MultipleSubscriptionError,
    NoConverterFoundError,
    ProtocolError,
    RestCoreError,
    TimeoutError,
    TransportError,
)
from .http_primitives import Headers, HttpMethod, RestClientResponse
from .media_type import MediaType
from .request import ExchangeState, RestClientRequest
from .rx import RxRestClient, SingleObservable, SingleValueBridge
from .transport import H11Transport, Transport

__all__ = [
    "RestClient",
    "RestClientOptions",
    "RestClientRequest",
    "RestClientResponse",
    "ExchangeState",
    "Headers",
    "HttpMethod",
    "MediaType",
    "HttpMessageConverter",
    "ConverterRegistry",
    "FormHttpMessageConverter",
    "StringHttpMessageConverter",
    "ByteArrayHttpMessageConverter",
    "JsonHttpMessageConverter",
    "default_converters",
    "Transport",
    "H11Transport",
    "RxRestClient",
    "SingleObservable",
    "SingleValueBridge",
    "RestCoreError",
    "MalformedMediaTypeError",
    "NoConverterFoundError",
    "ConversionError",
    "HttpStatusCodeError",
    "HttpClientError",
    "HttpServerError",
    "TransportError",
    "ProtocolError",
    "TimeoutError",
    "InvalidStateError",
    "MultipleSubscriptionError",
]
