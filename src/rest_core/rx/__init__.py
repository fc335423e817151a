"""
Reactive (single-value stream) API for rest_core.
"""

from .bridge import (
    BridgeState,
    CallbackSubscriber,
    SingleObservable,
    SingleValueBridge,
    Subscriber,
    Subscription,
)
from .client import RxRestClient

__all__ = [
    "BridgeState",
    "CallbackSubscriber",
    "SingleObservable",
    "SingleValueBridge",
    "Subscriber",
    "Subscription",
    "RxRestClient",
]
