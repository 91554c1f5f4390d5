"""Rest window between sets.

The window stores an absolute end time instead of a counter, so a client
that was suspended (locked screen, backgrounded tab) gets the right value on
its next tick no matter how many ticks it missed.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

# Milliseconds since the epoch
Clock = Callable[[], int]


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def remaining_seconds(ends_at_ms: int, now: int) -> int:
    """Whole seconds left, rounded up, never negative."""
    diff = ends_at_ms - now
    if diff <= 0:
        return 0
    return -(-diff // 1000)


@dataclass(frozen=True)
class RestWindow:
    """Timed pause after a completed set.

    Attributes:
        duration: Configured rest in seconds
        ends_at_ms: Absolute end time in epoch milliseconds
    """

    duration: int
    ends_at_ms: int

    @classmethod
    def open(cls, duration: int, now: int) -> RestWindow:
        return cls(duration=duration, ends_at_ms=now + duration * 1000)

    def remaining(self, now: int) -> int:
        return remaining_seconds(self.ends_at_ms, now)

    def is_over(self, now: int) -> bool:
        return self.remaining(now) == 0

    def progress(self, now: int) -> float:
        """Fraction of the window already elapsed, in [0, 1]."""
        if self.duration <= 0:
            return 1.0
        elapsed = self.duration - self.remaining(now)
        return max(0.0, min(1.0, elapsed / self.duration))


def format_clock(seconds: int) -> str:
    """Format seconds as m:ss."""
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes}:{secs:02d}"
