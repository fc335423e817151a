"""
Reactive facade over RestClient.

Every call issues its request immediately and returns a
SingleObservable that emits the RestClientResponse (or the error)
once, to a subscriber attached before or after completion.
"""

import logging
from typing import Any, Callable, Optional, Union

from ..client import RestClient
from ..http_primitives import HttpMethod, RestClientResponse
from ..request import RestClientRequest
from .bridge import SingleObservable, SingleValueBridge

RequestCallback = Callable[[RestClientRequest], None]

logger = logging.getLogger(__name__)


def _end_request(request: RestClientRequest) -> None:
    request.end()


class RxRestClient:
    """
    Reactive REST client.

    The optional request_callback configures the request (headers,
    body) and must end it; by default the request is ended without a
    body.
    """

    def __init__(self, rest_client: RestClient) -> None:
        self._rest_client = rest_client

    @property
    def rest_client(self) -> RestClient:
        return self._rest_client

    def get(
        self,
        uri: str,
        response_type: Any = None,
        request_callback: Optional[RequestCallback] = None,
    ) -> SingleObservable[RestClientResponse]:
        return self.request(HttpMethod.GET, uri, response_type, request_callback)

    def post(
        self,
        uri: str,
        response_type: Any = None,
        request_callback: Optional[RequestCallback] = None,
    ) -> SingleObservable[RestClientResponse]:
        return self.request(HttpMethod.POST, uri, response_type, request_callback)

    def put(
        self,
        uri: str,
        response_type: Any = None,
        request_callback: Optional[RequestCallback] = None,
    ) -> SingleObservable[RestClientResponse]:
        return self.request(HttpMethod.PUT, uri, response_type, request_callback)

    def delete(
        self,
        uri: str,
        response_type: Any = None,
        request_callback: Optional[RequestCallback] = None,
    ) -> SingleObservable[RestClientResponse]:
        return self.request(HttpMethod.DELETE, uri, response_type, request_callback)

    def request(
        self,
        method: Union[str, HttpMethod],
        uri: str,
        response_type: Any = None,
        request_callback: Optional[RequestCallback] = None,
    ) -> SingleObservable[RestClientResponse]:
        """
        Issue a request and return its outcome as a SingleObservable.

        An exception raised by request_callback fails the observable.
        """
        bridge: SingleValueBridge[RestClientResponse] = SingleValueBridge()
        request = self._rest_client.request(method, uri, response_type, bridge.handle)
        request.exception_handler(bridge.fail)

        try:
            (request_callback or _end_request)(request)
        except Exception as e:
            logger.debug(f"Request callback for {request} raised: {e!r}")
            bridge.fail(e)

        return SingleObservable(bridge)
