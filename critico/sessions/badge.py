# critico/sessions/badge.py
from __future__ import annotations

from typing import Callable


class BadgeCounter:
    """Unread badge of one user session; last writer wins."""

    def __init__(self) -> None:
        self._value = 0
        self._listeners: list[Callable[[int], None]] = []

    @property
    def value(self) -> int:
        return self._value

    def set(self, value: int) -> None:
        value = max(0, int(value))
        if value == self._value:
            return
        self._value = value
        for listener in list(self._listeners):
            listener(value)

    def reset(self) -> None:
        self.set(0)

    def subscribe(self, listener: Callable[[int], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe
