"""
Single-value bridge from callbacks to a subscribable stream.

SingleValueBridge takes a one-shot completion (a value or an error,
delivered once from any thread) and exposes it as a stream that emits
that value followed by end-of-stream. The outcome is memoized, so a
subscriber that attaches after completion still receives it.

The bridge has one subscriber per completion cycle. complete()/fail()
can race with attach() from another thread. State and subscriber slot
are therefore updated under one lock, so each subscriber is served
either by the replay in attach() or by the delivery in complete()/fail(),
never both and never neither. Callbacks run outside the lock.
"""

import asyncio
import logging
import threading
from enum import Enum
from typing import Any, Callable, Generator, Generic, Optional, TypeVar, Union

from ..exceptions import MultipleSubscriptionError

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Subscriber(Generic[T]):
    """
    Receiver of a stream's signals.

    Subclasses override on_next/on_error/on_completed. A subscriber
    that has unsubscribed receives no further signals.
    """

    def __init__(self) -> None:
        self._unsubscribed = threading.Event()

    def on_next(self, value: T) -> None:
        pass

    def on_error(self, error: BaseException) -> None:
        pass

    def on_completed(self) -> None:
        pass

    def unsubscribe(self) -> None:
        self._unsubscribed.set()

    @property
    def is_unsubscribed(self) -> bool:
        return self._unsubscribed.is_set()


class CallbackSubscriber(Subscriber[T]):
    """Subscriber built from plain functions."""

    def __init__(
        self,
        on_next: Optional[Callable[[T], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
        on_completed: Optional[Callable[[], None]] = None,
    ) -> None:
        super().__init__()
        self._on_next = on_next
        self._on_error = on_error
        self._on_completed = on_completed

    def on_next(self, value: T) -> None:
        if self._on_next is not None:
            self._on_next(value)

    def on_error(self, error: BaseException) -> None:
        if self._on_error is None:
            logger.error(f"Unhandled stream error: {error!r}")
            return
        self._on_error(error)

    def on_completed(self) -> None:
        if self._on_completed is not None:
            self._on_completed()


class Subscription:
    """Returned by attach(); unsubscribe() withdraws interest."""

    def __init__(self, bridge: "SingleValueBridge", subscriber: Subscriber) -> None:
        self._bridge = bridge
        self._subscriber = subscriber

    def unsubscribe(self) -> None:
        self._subscriber.unsubscribe()
        self._bridge._release(self._subscriber)

    @property
    def is_unsubscribed(self) -> bool:
        return self._subscriber.is_unsubscribed


class BridgeState(Enum):
    """States of a single-value bridge."""
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class SingleValueBridge(Generic[T]):
    """
    Memoizing adapter from a one-shot callback to a single subscriber.

    The state moves from ACTIVE to COMPLETED or FAILED exactly once.
    Later complete()/fail() calls are logged and ignored.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = BridgeState.ACTIVE
        self._result: Optional[T] = None
        self._error: Optional[BaseException] = None
        self._subscriber: Optional[Subscriber[T]] = None

    @property
    def state(self) -> BridgeState:
        return self._state

    def attach(self, subscriber: Subscriber[T]) -> Subscription:
        """
        Attach the subscriber, replaying the outcome if already known.

        Raises:
            MultipleSubscriptionError: If a live subscriber is attached
        """
        with self._lock:
            state = self._state
            if state is BridgeState.ACTIVE:
                current = self._subscriber
                if current is not None and current is not subscriber and not current.is_unsubscribed:
                    raise MultipleSubscriptionError()
                self._subscriber = subscriber
                return Subscription(self, subscriber)

        logger.debug(f"Replaying {state.value} outcome to late subscriber")
        if state is BridgeState.COMPLETED:
            _emit_value(subscriber, self._result)
        else:
            _emit_error(subscriber, self._error)
        return Subscription(self, subscriber)

    def complete(self, value: T) -> None:
        """Complete with value, delivering it to the attached subscriber if any."""
        with self._lock:
            if self._state is not BridgeState.ACTIVE:
                logger.warning(f"Ignoring completion of {self._state.value} bridge")
                return
            self._result = value
            self._state = BridgeState.COMPLETED
            subscriber = self._take_subscriber()

        if subscriber is not None:
            _emit_value(subscriber, value)

    def fail(self, error: BaseException) -> None:
        """Fail with error, delivering it to the attached subscriber if any."""
        with self._lock:
            if self._state is not BridgeState.ACTIVE:
                logger.warning(f"Ignoring failure of {self._state.value} bridge: {error!r}")
                return
            self._error = error
            self._state = BridgeState.FAILED
            subscriber = self._take_subscriber()

        if subscriber is not None:
            _emit_error(subscriber, error)

    def handle(self, value: T) -> None:
        """Callback-style alias of complete(), usable as a response handler."""
        self.complete(value)

    def _take_subscriber(self) -> Optional[Subscriber[T]]:
        subscriber, self._subscriber = self._subscriber, None
        if subscriber is None or subscriber.is_unsubscribed:
            return None
        return subscriber

    def _release(self, subscriber: Subscriber[T]) -> None:
        with self._lock:
            if self._subscriber is subscriber:
                self._subscriber = None


def _emit_value(subscriber: Subscriber[T], value: Any) -> None:
    if subscriber.is_unsubscribed:
        return
    subscriber.on_next(value)
    if not subscriber.is_unsubscribed:
        subscriber.on_completed()


def _emit_error(subscriber: Subscriber[T], error: Optional[BaseException]) -> None:
    if not subscriber.is_unsubscribed:
        subscriber.on_error(error)


class SingleObservable(Generic[T]):
    """
    Stream view of a SingleValueBridge.

    subscribe() takes a Subscriber or plain callbacks. The observable is
    also awaitable from asyncio code: ``response = await observable``.
    """

    def __init__(self, bridge: SingleValueBridge[T]) -> None:
        self._bridge = bridge

    def subscribe(
        self,
        on_next: Union[Subscriber[T], Callable[[T], None], None] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
        on_completed: Optional[Callable[[], None]] = None,
    ) -> Subscription:
        """
        Subscribe to the single value.

        Raises:
            MultipleSubscriptionError: If another live subscriber is attached
        """
        if isinstance(on_next, Subscriber):
            subscriber = on_next
        else:
            subscriber = CallbackSubscriber(on_next, on_error, on_completed)
        return self._bridge.attach(subscriber)

    def to_future(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> "asyncio.Future[T]":
        """
        Subscribe with an asyncio.Future resolved on loop.

        Signals may arrive from any thread; they are handed to the loop
        with call_soon_threadsafe().
        """
        loop = loop or asyncio.get_running_loop()
        future: "asyncio.Future[T]" = loop.create_future()

        def set_result(value: T) -> None:
            if not future.done():
                future.set_result(value)

        def set_exception(error: BaseException) -> None:
            if not future.done():
                future.set_exception(error)

        subscription = self.subscribe(
            on_next=lambda value: loop.call_soon_threadsafe(set_result, value),
            on_error=lambda error: loop.call_soon_threadsafe(set_exception, error),
        )
        future.add_done_callback(lambda _: subscription.unsubscribe() if future.cancelled() else None)
        return future

    def __await__(self) -> Generator[Any, None, T]:
        return self.to_future().__await__()
