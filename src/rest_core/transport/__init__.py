"""
Transport components for rest_core.

The exchange pipeline talks to the network only through the
Transport and RequestSink interfaces defined here.
"""

from .base import FailureCallback, RequestSink, ResponseCallback, TimerHandle, Transport
from .h11_transport import H11RequestSink, H11Transport
from .mock import MockRequestSink, MockTimerHandle, MockTransport

__all__ = [
    "Transport",
    "RequestSink",
    "TimerHandle",
    "ResponseCallback",
    "FailureCallback",
    "H11Transport",
    "H11RequestSink",
    "MockTransport",
    "MockRequestSink",
    "MockTimerHandle",
]
