"""Observable value holder for state the presentation layer subscribes to"""
import logging
from typing import Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Observable(Generic[T]):
    """
    Holds one value and notifies subscribers when it changes.

    Subscribers are called synchronously, in subscription order, with the new
    value. A subscriber that raises is logged and does not stop the others.
    """

    def __init__(self, value: Optional[T] = None, name: str = "observable"):
        self._value = value
        self._name = name
        self._subscribers: List[Callable[[Optional[T]], None]] = []

    @property
    def value(self) -> Optional[T]:
        return self._value

    def set(self, value: Optional[T]) -> None:
        """Replace the value and notify subscribers if it changed identity"""
        if value is self._value:
            return
        self._value = value
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception as e:
                logger.error(f"Subscriber of {self._name} failed: {e}", exc_info=True)

    def subscribe(self, callback: Callable[[Optional[T]], None]) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it"""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
