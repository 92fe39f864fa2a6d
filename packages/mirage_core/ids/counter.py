"""Process-wide request-id counter used for log correlation."""

from __future__ import annotations

import sys
import threading


class RequestCounter:
    """Monotonic integer sequence guarded by its own lock.

    Ids start at 1. When the current value reaches ``maximum - 1`` the next
    id is 0, so the sequence never exceeds the configured bound. Ids are only
    meant to correlate log lines, not to be globally unique.
    """

    def __init__(self, *, start: int = 0, maximum: int = sys.maxsize) -> None:
        if maximum < 2:
            raise ValueError("maximum must be at least 2")
        if not 0 <= start < maximum:
            raise ValueError("start must be within [0, maximum)")
        self._value = start
        self._maximum = maximum
        self._lock = threading.Lock()

    @property
    def maximum(self) -> int:
        """Return the exclusive upper bound of issued ids."""
        return self._maximum

    def increment(self) -> int:
        """Advance the counter and return the new id."""
        with self._lock:
            if self._value == self._maximum - 1:
                self._value = 0
            else:
                self._value += 1
            return self._value

    def get(self) -> int:
        """Return the most recently issued id."""
        with self._lock:
            return self._value


_SHARED_COUNTER = RequestCounter()


def shared_request_counter() -> RequestCounter:
    """Return the counter shared by every client in this process."""
    return _SHARED_COUNTER
