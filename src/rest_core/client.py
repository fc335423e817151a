"""
REST client for rest_core.

RestClient is the typed call surface. Each call creates a
RestClientRequest that shares the client's transport, converter
registry, options and exception handler.
"""

import logging
from typing import Any, Iterable, Optional, Union

from .config import RestClientOptions
from .converters.base import HttpMessageConverter
from .converters.registry import ConverterRegistry
from .http_primitives import HttpMethod
from .request import ExceptionHandler, ResponseHandler, RestClientRequest
from .transport.base import Transport

logger = logging.getLogger(__name__)


class RestClient:
    """
    REST client with content-negotiated bodies.

    Example:
        client = RestClient(transport, default_converters())
        request = client.get("/api/v1/users/u1", User, handle_user)
        request.exception_handler(handle_error)
        request.end()

    A response_type of None means no response body is expected; the
    handler then receives a response whose body is None.
    """

    def __init__(
        self,
        transport: Transport,
        converters: Union[ConverterRegistry, Iterable[HttpMessageConverter]],
        exception_handler: Optional[ExceptionHandler] = None,
        options: Optional[RestClientOptions] = None,
    ):
        """
        Initialize the client.

        Args:
            transport: Transport that carries every exchange
            converters: Converters in priority order, or a ready registry
            exception_handler: Default failure handler and last line of
                defense for exceptions raised by response handlers
            options: Timeout, global headers and default Content-Type
        """
        if not isinstance(converters, ConverterRegistry):
            converters = ConverterRegistry(converters)
        self._transport = transport
        self._registry = converters
        self._exception_handler = exception_handler
        self._options = options or RestClientOptions()

    @property
    def registry(self) -> ConverterRegistry:
        return self._registry

    @property
    def options(self) -> RestClientOptions:
        return self._options

    def exception_handler(self, handler: Optional[ExceptionHandler]) -> "RestClient":
        """Replace the client-wide exception handler."""
        self._exception_handler = handler
        return self

    def get(
        self,
        uri: str,
        response_type: Any = None,
        response_handler: Optional[ResponseHandler] = None,
    ) -> RestClientRequest:
        return self.request(HttpMethod.GET, uri, response_type, response_handler)

    def post(
        self,
        uri: str,
        response_type: Any = None,
        response_handler: Optional[ResponseHandler] = None,
    ) -> RestClientRequest:
        return self.request(HttpMethod.POST, uri, response_type, response_handler)

    def put(
        self,
        uri: str,
        response_type: Any = None,
        response_handler: Optional[ResponseHandler] = None,
    ) -> RestClientRequest:
        return self.request(HttpMethod.PUT, uri, response_type, response_handler)

    def delete(
        self,
        uri: str,
        response_type: Any = None,
        response_handler: Optional[ResponseHandler] = None,
    ) -> RestClientRequest:
        return self.request(HttpMethod.DELETE, uri, response_type, response_handler)

    def request(
        self,
        method: Union[str, HttpMethod],
        uri: str,
        response_type: Any = None,
        response_handler: Optional[ResponseHandler] = None,
    ) -> RestClientRequest:
        """
        Create a request for any method.

        Args:
            method: HTTP method
            uri: Absolute URI or path relative to the transport's host
            response_type: Expected body type, or None for no body
            response_handler: Receives the RestClientResponse on success

        Returns:
            The request handle; call end() to send it.
        """
        method = HttpMethod.of(method)
        logger.debug(f"Creating request {method.value} {uri}")
        return RestClientRequest(
            transport=self._transport,
            registry=self._registry,
            method=method,
            uri=uri,
            response_type=response_type,
            response_handler=response_handler,
            client_exception_handler=self._exception_handler,
            options=self._options,
        )
