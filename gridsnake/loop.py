"""Fixed-cadence driver around a GameState.

The loop owns at most one interval handle from its scheduler. ``start`` cancels any old
handle before creating a new one; ``pause``, ``reset`` and game over cancel it before
returning. Every tick runs ``GameState.step()`` and fans the result out to listeners.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol

from . import config
from .game import GameState, Phase, Snapshot, StepResult

logger = logging.getLogger(__name__)


class HighScorePersistence(Protocol):
    def load_high_score(self) -> int: ...

    def save_high_score(self, value: int) -> None: ...


@dataclass(frozen=True)
class GameOverEvent:
    final_score: int
    high_score: int
    elapsed_seconds: int
    reason: Optional[str]


StepListener = Callable[[StepResult], None]
GameOverListener = Callable[[GameOverEvent], None]


class GameLoop:
    def __init__(
        self,
        state: GameState,
        scheduler: Any,
        store: Optional[HighScorePersistence] = None,
        *,
        tick_ms: Optional[int] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self.state = state
        self.scheduler = scheduler
        self.store = store
        self.tick_ms = int(config.TICK_MS if tick_ms is None else tick_ms)
        self._handle: Optional[Any] = None
        self._executor = executor
        self._owns_executor = executor is None
        self._pending_saves: List[Future] = []
        self._step_listeners: List[StepListener] = []
        self._game_over_listeners: List[GameOverListener] = []

        if store is not None:
            self.state.high_score = max(self.state.high_score, self._load_high_score())

    def _load_high_score(self) -> int:
        try:
            return max(0, int(self.store.load_high_score()))
        except Exception as exc:
            logger.warning("High score load failed (%s); using 0", exc)
            return 0

    # ----------------------------
    # Listeners
    # ----------------------------
    def add_listener(self, listener: StepListener) -> None:
        self._step_listeners.append(listener)

    def add_game_over_listener(self, listener: GameOverListener) -> None:
        self._game_over_listeners.append(listener)

    # ----------------------------
    # Commands
    # ----------------------------
    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def driver_active(self) -> bool:
        return self._handle is not None

    def snapshot(self) -> Snapshot:
        return self.state.snapshot()

    def set_direction(self, dx: int, dy: int) -> bool:
        return self.state.set_direction((dx, dy))

    def start(self) -> bool:
        """Run from IDLE, PAUSED or GAME_OVER; a finished game is reset first."""
        if self.state.phase is Phase.RUNNING:
            return False
        self._cancel_driver()
        self.state.begin()
        self._handle = self.scheduler.call_every(self.tick_ms, self.tick)
        logger.debug("Started (tick=%dms)", self.tick_ms)
        return True

    def pause(self) -> bool:
        if self.state.phase is not Phase.RUNNING:
            return False
        self._cancel_driver()
        self.state.suspend()
        logger.debug("Paused at %ds", self.state.elapsed_seconds)
        return True

    def toggle(self) -> bool:
        """Pause when running, start otherwise; returns True if now running."""
        if self.state.phase is Phase.RUNNING:
            self.pause()
            return False
        return self.start()

    def reset(
        self,
        cols: Optional[int] = None,
        rows: Optional[int] = None,
        initial_length: Optional[int] = None,
    ) -> Snapshot:
        """Stop the driver and start a fresh session in IDLE."""
        self._cancel_driver()
        snapshot = self.state.reset(cols, rows, initial_length)
        logger.debug("Reset to %dx%d, length %d", snapshot.cols, snapshot.rows, len(snapshot.snake))
        return snapshot

    def restart(self) -> bool:
        """Dialog "restart" action: reset then start."""
        self.reset()
        return self.start()

    # ----------------------------
    # Driver
    # ----------------------------
    def _cancel_driver(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def tick(self) -> Optional[StepResult]:
        if self.state.phase is not Phase.RUNNING:
            # A stale timer fired after a transition; drop it.
            self._cancel_driver()
            return None

        result = self.state.step()
        if result.terminated:
            self._cancel_driver()
            if result.new_high_score is not None:
                self._save_high_score(result.new_high_score)

        for listener in list(self._step_listeners):
            listener(result)

        if result.terminated:
            event = GameOverEvent(
                final_score=result.final_score or 0,
                high_score=result.snapshot.high_score,
                elapsed_seconds=result.snapshot.elapsed_seconds,
                reason=result.reason,
            )
            for listener in list(self._game_over_listeners):
                listener(event)
        return result

    # ----------------------------
    # Persistence
    # ----------------------------
    def _save_high_score(self, value: int) -> None:
        if self.store is None:
            return
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="highscore")
        future = self._executor.submit(self.store.save_high_score, value)
        future.add_done_callback(self._on_save_done)
        self._pending_saves = [f for f in self._pending_saves if not f.done()]
        self._pending_saves.append(future)

    def _on_save_done(self, future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            logger.warning("High score save failed: %s", exc)

    def close(self) -> None:
        """Stop the driver and wait for queued high score writes."""
        self._cancel_driver()
        for future in self._pending_saves:
            future.exception()
        self._pending_saves = []
        if self._executor is not None and self._owns_executor:
            self._executor.shutdown(wait=True)
            self._executor = None
