"""Millisecond timeout tracking."""

from __future__ import annotations

import time
from typing import Callable


def _millis() -> int:
    return time.monotonic_ns() // 1_000_000


class TimeoutHelper:
    """A timeout measured in milliseconds from the moment it was set."""

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self._clock = clock or _millis
        self.timeout = 0
        self.start_millis = 0

    def set(self, ms: int) -> None:
        """Start a new timeout of ``ms`` milliseconds from now."""
        self.timeout = ms
        self.start_millis = self._clock()

    def extend(self, ms: int) -> None:
        """Lengthen the current timeout by ``ms`` milliseconds."""
        self.timeout += ms

    def reset(self) -> None:
        """Restart the current timeout from now."""
        self.start_millis = self._clock()

    def occurred(self) -> bool:
        """True once more than the timeout has passed since it was started."""
        return self._clock() > self.start_millis + self.timeout