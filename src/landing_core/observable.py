"""Subscribable values published by the classifier."""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

__all__ = ["Observable"]


logger = logging.getLogger(__name__)

T = TypeVar("T")


class Observable(Generic[T]):
    """Value holder notifying subscribers whenever the stored value changes.

    Setting the value it already holds is silent, which lets the classifier
    republish every output on each evaluation without flooding consumers.
    """

    __slots__ = ("_value", "_subscribers")

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._subscribers: list[Callable[[T], None]] = []

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> bool:
        """Store ``value`` and return ``True`` when subscribers were notified."""

        if value == self._value:
            return False
        self._value = value
        for callback in tuple(self._subscribers):
            callback(value)
        return True

    def subscribe(
        self, callback: Callable[[T], None], *, initial_notify: bool = False
    ) -> Callable[[], None]:
        """Register ``callback`` and return a function removing it again."""

        self._subscribers.append(callback)
        if initial_notify:
            callback(self._value)

        def unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                logger.debug("Observable subscriber already removed.")

        return unsubscribe

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"
