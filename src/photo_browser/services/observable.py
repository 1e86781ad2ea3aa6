"""Push-based observable values used for storage and session state streams."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")

Listener = Callable[[T], None]

_logger = logging.getLogger(__name__)


@dataclass
class Subscription:
    """Handle returned by ``ObservableValue.subscribe``."""

    _cancel: Callable[[], None]
    active: bool = True

    def cancel(self) -> None:
        """Stop receiving emissions. Safe to call more than once."""
        if self.active:
            self.active = False
            self._cancel()


class ObservableValue(Generic[T]):
    """Holds a current value and re-emits it to listeners on every change.

    Emissions are delivered synchronously, in subscription order, from the
    call to ``set``. A listener that raises is logged and does not prevent
    delivery to the remaining listeners.
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._listeners: list[Listener[T]] = []
        self._upstream: list[Subscription] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Replace the current value and notify listeners."""
        self._value = value
        for listener in list(self._listeners):
            _deliver(listener, value)

    def subscribe(
        self, listener: Listener[T], *, emit_current: bool = True
    ) -> Subscription:
        """Register a listener, optionally replaying the current value first."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        subscription = Subscription(_remove)
        if emit_current:
            _deliver(listener, self._value)
        return subscription

    def map(self, transform: Callable[[T], U]) -> "ObservableValue[U]":
        """Return a derived observable that tracks ``transform(value)``."""
        derived: ObservableValue[U] = ObservableValue(transform(self._value))
        derived._upstream.append(
            self.subscribe(
                lambda value: derived.set(transform(value)), emit_current=False
            )
        )
        return derived

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    def close(self) -> None:
        """Detach from any upstream source and drop all listeners."""
        for subscription in self._upstream:
            subscription.cancel()
        self._upstream.clear()
        self._listeners.clear()


def _deliver(listener: Listener[T], value: T) -> None:
    try:
        listener(value)
    except Exception:
        _logger.exception("Observable listener failed")
