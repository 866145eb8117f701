"""Common state shared by the inverter response parsers."""

from __future__ import annotations

import enum
import threading


class LastCommandSuccess(enum.IntEnum):
    """Outcome of the most recent command or request sent to an inverter."""

    OK = 0
    NOK = 1
    PENDING = 2


class Parser:
    """Base class holding the last update timestamp and the payload lock.

    Fragments are appended between ``begin_append_fragment`` and
    ``end_append_fragment``; the parser can also be used as a context
    manager to do the same.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.last_update = 0

    def set_last_update(self, last_update: int) -> None:
        """Record the time new data was received."""
        self.last_update = last_update

    def begin_append_fragment(self) -> None:
        """Take the payload lock before fragments are appended."""
        self._lock.acquire()

    def end_append_fragment(self) -> None:
        """Release the payload lock once all fragments are appended."""
        self._lock.release()

    def __enter__(self) -> "Parser":
        self.begin_append_fragment()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.end_append_fragment()