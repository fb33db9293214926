"""Observable single-value cells for publishing presentation state."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Callable, Generic, List, TypeVar

T = TypeVar("T")

Listener = Callable[[T], None]

logger = logging.getLogger("userdir.observable")


class StateCell(Generic[T]):
    """Hold the latest value and replay it to every new subscriber.

    Subscribers receive the current value as soon as they subscribe and then
    every subsequent change. Assigning a value equal to the current one does
    not notify anybody.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._listeners: List[Listener[T]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        if value == self._value:
            return
        self._value = value
        for listener in list(self._listeners):
            self._notify(listener, value)

    def subscribe(self, listener: Listener[T]) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""

        self._listeners.append(listener)
        self._notify(listener, self._value)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    async def stream(self) -> AsyncIterator[T]:
        """Yield the current value followed by every change."""

        queue: asyncio.Queue[T] = asyncio.Queue()
        unsubscribe = self.subscribe(queue.put_nowait)
        try:
            while True:
                yield await queue.get()
        finally:
            unsubscribe()

    @staticmethod
    def _notify(listener: Listener[T], value: T) -> None:
        try:
            listener(value)
        except Exception:
            logger.exception("State listener %r failed", listener)

    def __repr__(self) -> str:
        return f"StateCell({self._value!r})"


__all__ = ["StateCell"]
