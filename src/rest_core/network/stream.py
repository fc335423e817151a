"""
Network stream interface for rest_core.

This module defines the NetworkStream interface that the HTTP/1.1
connection reads from and writes to.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class NetworkStream(ABC):
    """
    Interface for network streams with async I/O operations.

    Implementations wrap a connected socket (or an in-memory stand-in)
    and expose read, write and close in an asynchronous manner.
    """

    @abstractmethod
    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        """
        Read data from the stream.

        Args:
            max_bytes: Maximum number of bytes to read.

        Returns:
            The data read, or b"" once the peer has closed.

        Raises:
            RuntimeError: If the stream is closed.
            OSError: If a network error occurs.
        """
        pass

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """
        Write data to the stream.

        Raises:
            RuntimeError: If the stream is closed.
            OSError: If a network error occurs.
        """
        pass

    @abstractmethod
    async def aclose(self) -> None:
        """Close the stream and release the socket."""
        pass

    @abstractmethod
    def get_extra_info(self, name: str) -> Optional[Any]:
        """
        Get extra information about the stream.

        Common names are "peername" and "sockname".
        """
        pass

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        pass
