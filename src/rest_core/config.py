"""
Client configuration for rest_core.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from .http_primitives import Headers
from .media_type import MediaType


@dataclass
class RestClientOptions:
    """
    Options shared by every request of a RestClient.

    Attributes:
        request_timeout: Seconds to wait for a response; None or 0 disables
        global_headers: Headers added to every request
        default_content_type: Content-Type used for bodies written
            without an explicit Content-Type header
    """

    request_timeout: Optional[float] = None
    global_headers: Headers = field(default_factory=Headers)
    default_content_type: Optional[Union[MediaType, str]] = None

    def __post_init__(self) -> None:
        """Validate options after initialization."""
        if self.request_timeout is not None and self.request_timeout < 0:
            raise ValueError("request_timeout must be non-negative")

        if not isinstance(self.global_headers, Headers):
            raise ValueError("global_headers must be Headers")

        if isinstance(self.default_content_type, str):
            self.default_content_type = MediaType.parse(self.default_content_type)
