"""
Network backend components for rest_core.

This module provides the low-level networking abstractions
used by the bundled h11 transport.
"""

from .asyncio_backend import AsyncioNetworkBackend, AsyncioNetworkStream
from .backend import NetworkBackend
from .mock import MockNetworkBackend, MockNetworkStream
from .stream import NetworkStream

__all__ = [
    "NetworkBackend",
    "NetworkStream",
    "AsyncioNetworkBackend",
    "AsyncioNetworkStream",
    "MockNetworkBackend",
    "MockNetworkStream",
]
