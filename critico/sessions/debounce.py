# critico/sessions/debounce.py
from __future__ import annotations

import functools
import threading
from typing import Callable

TimerFactory = Callable[[float, Callable[[], None]], "threading.Timer"]


class Debouncer:
    """Coalesces bursts of triggers; each trigger restarts the delay."""

    def __init__(
        self,
        delay: float,
        callback: Callable[[], None],
        *,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        self._delay = delay
        self._callback = callback
        self._timer_factory = timer_factory or threading.Timer
        self._lock = threading.Lock()
        self._timer = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def trigger(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = self._timer_factory(self._delay, functools.partial(self._fire, self._generation))
            timer.daemon = True
            self._timer = timer
        timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._generation += 1

    def _fire(self, generation: int) -> None:
        with self._lock:
            # a cancelled timer can still fire if it was already running
            if generation != self._generation:
                return
            self._timer = None
        self._callback()
