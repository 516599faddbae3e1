from __future__ import annotations

import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

Clock = Callable[[], float]


class MoveThrottle(Generic[T]):
    """Timestamp-gated pass-through for high-rate pointer moves.

    A value offered inside the window is parked; a later value replaces it.
    Parked values go out on the next offer past the window or on ``flush``.
    """

    def __init__(self, handler: Callable[[T], None], interval: float, clock: Clock = time.monotonic) -> None:
        self.handler = handler
        self.interval = max(0.0, interval)
        self.clock = clock
        self._last: Optional[float] = None
        self._pending: Optional[T] = None
        self._has_pending = False

    def offer(self, value: T) -> bool:
        now = self.clock()
        if self._last is not None and now - self._last < self.interval:
            self._pending = value
            self._has_pending = True
            return False
        self._last = now
        self._has_pending = False
        self._pending = None
        self.handler(value)
        return True

    def flush(self) -> bool:
        if not self._has_pending:
            return False
        value = self._pending
        self._has_pending = False
        self._pending = None
        self._last = self.clock()
        self.handler(value)
        return True

    def reset(self) -> None:
        self._last = None
        self._pending = None
        self._has_pending = False


class Debouncer(Generic[T]):
    """Applies only the last request once ``delay`` seconds pass without another."""

    def __init__(self, handler: Callable[[T], None], delay: float, clock: Clock = time.monotonic) -> None:
        self.handler = handler
        self.delay = max(0.0, delay)
        self.clock = clock
        self._due: Optional[float] = None
        self._value: Optional[T] = None

    @property
    def pending(self) -> bool:
        return self._due is not None

    def request(self, value: T) -> None:
        self._value = value
        self._due = self.clock() + self.delay

    def poll(self) -> bool:
        if self._due is None or self.clock() < self._due:
            return False
        value = self._value
        self._due = None
        self._value = None
        self.handler(value)
        return True
