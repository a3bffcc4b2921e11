"""Interval timers for driving the game loop.

Both schedulers run callbacks on the caller's thread: ``ManualScheduler`` when time is
advanced explicitly, ``PygameScheduler`` when the host hands it a timer event from the
pygame queue.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from .utils import import_pygame

Callback = Callable[[], None]


class ManualTimer:
    def __init__(self, scheduler: "ManualScheduler", timer_id: int, interval_ms: int, callback: Callback) -> None:
        self.scheduler = scheduler
        self.timer_id = timer_id
        self.interval_ms = interval_ms
        self.callback = callback
        self.next_due_ms = scheduler.now_ms + interval_ms

    @property
    def active(self) -> bool:
        return self.timer_id in self.scheduler._timers

    def cancel(self) -> None:
        self.scheduler._timers.pop(self.timer_id, None)


class ManualScheduler:
    """Simulated-time scheduler.

    Time only moves inside ``advance``; timers fire in due order, each on its own
    simulated timestamp. ``clock`` exposes the same time in seconds for stopwatches.
    """

    def __init__(self) -> None:
        self.now_ms = 0
        self._timers: Dict[int, ManualTimer] = {}
        self._next_id = 0

    @property
    def active_timers(self) -> int:
        return len(self._timers)

    def clock(self) -> float:
        return self.now_ms / 1000.0

    def call_every(self, interval_ms: int, callback: Callback) -> ManualTimer:
        interval_ms = max(1, int(interval_ms))
        self._next_id += 1
        timer = ManualTimer(self, self._next_id, interval_ms, callback)
        self._timers[timer.timer_id] = timer
        return timer

    def advance(self, ms: int) -> None:
        target = self.now_ms + max(0, int(ms))
        while True:
            due = [t for t in self._timers.values() if t.next_due_ms <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.next_due_ms, t.timer_id))
            self.now_ms = timer.next_due_ms
            timer.next_due_ms += timer.interval_ms
            timer.callback()
        self.now_ms = target


class PygameTimer:
    def __init__(self, scheduler: "PygameScheduler", generation: int) -> None:
        self.scheduler = scheduler
        self.generation = generation

    @property
    def active(self) -> bool:
        return self.scheduler._generation == self.generation and self.scheduler._callback is not None

    def cancel(self) -> None:
        if self.active:
            self.scheduler._cancel()


class PygameScheduler:
    """Interval timer backed by ``pygame.time.set_timer``.

    pygame keeps one timer per event type, so the scheduler reserves a single custom type
    and runs one timer at a time; ``call_every`` replaces the previous one. Each timer
    stamps its events with a generation number, and ``dispatch`` drops events still
    queued from an older generation.
    """

    def __init__(self, pygame_module: Optional[Any] = None) -> None:
        self.pygame = pygame_module if pygame_module is not None else import_pygame()
        self.event_type = self.pygame.event.custom_type()
        self._generation = 0
        self._callback: Optional[Callback] = None

    def clock(self) -> float:
        return self.pygame.time.get_ticks() / 1000.0

    def call_every(self, interval_ms: int, callback: Callback) -> PygameTimer:
        self._cancel()
        self._generation += 1
        self._callback = callback
        event = self.pygame.event.Event(self.event_type, {"generation": self._generation})
        self.pygame.time.set_timer(event, max(1, int(interval_ms)))
        return PygameTimer(self, self._generation)

    def _cancel(self) -> None:
        if self._callback is not None:
            self._callback = None
            self.pygame.time.set_timer(self.event_type, 0)

    def dispatch(self, event: Any) -> bool:
        """Run the live timer's callback; return False for unrelated or stale events."""
        if event.type != self.event_type:
            return False
        if self._callback is None or getattr(event, "generation", None) != self._generation:
            return True
        self._callback()
        return True
