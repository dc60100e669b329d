from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic high-resolution clock abstraction.

    Session logic depends on this interface rather than calling real time
    directly. Marks are milliseconds, like a browser's ``performance.now()``.
    """

    def now(self) -> float:
        """Return a monotonic mark in milliseconds."""


class RealClock:
    """Production clock backed by time.perf_counter()."""

    def now(self) -> float:
        return time.perf_counter() * 1000.0


def elapsed_seconds(start_mark: float, end_mark: float) -> float:
    """Seconds between two millisecond marks.

    The caller guarantees ``end_mark >= start_mark``; nothing is clamped here.
    """

    return (end_mark - start_mark) / 1000.0
