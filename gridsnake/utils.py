from __future__ import annotations

import time
from typing import Callable, Optional

Clock = Callable[[], float]


def import_pygame():
    import os
    os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
    import pygame  # type: ignore
    return pygame


def segment_age_ratio(index: int, length: int) -> float:
    """Return a normalized "age" for a body segment: head=0, tail=1."""
    if length <= 1:
        return 0.0
    return float(index) / float(length - 1)


def format_time(seconds: int) -> str:
    """Format whole seconds as ``MM:SS`` (minutes are not wrapped at 60)."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class Stopwatch:
    """Accumulates running time across start/stop cycles.

    ``clock`` returns seconds as a float; ``time.monotonic`` by default, a simulated clock
    in headless runs and tests.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self.clock: Clock = clock or time.monotonic
        self._accumulated = 0.0
        self._origin: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._origin is not None

    def start(self) -> None:
        if self._origin is None:
            self._origin = self.clock()

    def stop(self) -> None:
        if self._origin is None:
            return
        self._accumulated += max(0.0, self.clock() - self._origin)
        self._origin = None

    def clear(self) -> None:
        self._accumulated = 0.0
        self._origin = None

    def elapsed(self) -> float:
        total = self._accumulated
        if self._origin is not None:
            total += max(0.0, self.clock() - self._origin)
        return total

    def elapsed_seconds(self) -> int:
        return int(self.elapsed())
