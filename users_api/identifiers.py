"""Identifier generation for newly created users."""

from __future__ import annotations

import threading
import time
from typing import Callable


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class IdGenerator:
    """Issue ids taken from the wall clock in milliseconds.

    Two requests landing in the same millisecond, or a clock that steps
    backwards, get the previous id plus one, so ids handed out by a single
    generator are strictly increasing.
    """

    def __init__(self, clock: Callable[[], int] = epoch_millis) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self) -> int:
        candidate = int(self._clock())
        with self._lock:
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return candidate


__all__ = ["IdGenerator", "epoch_millis"]
