"""Snake simulation: game state, one-tick step algorithm and food placement."""

from __future__ import annotations

import enum
import logging
import random
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, Optional, Sequence, Tuple

from . import config
from .rules import (
    INITIAL_DIRECTION,
    Direction,
    Position,
    advance,
    canonical_direction,
    clamp_grid,
    clamp_initial_length,
    is_fatal,
    is_reversal,
    starting_snake,
)
from .utils import Clock, Stopwatch

logger = logging.getLogger(__name__)


class Phase(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game_over"


class StepOutcome(enum.Enum):
    CONTINUED = "continued"
    ATE = "ate"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of a session, enough to draw a frame and the HUD."""

    snake: Tuple[Position, ...]
    food: Optional[Position]
    score: int
    high_score: int
    elapsed_seconds: int
    phase: Phase
    direction: Direction
    cols: int
    rows: int


@dataclass(frozen=True)
class StepResult:
    outcome: StepOutcome
    snapshot: Snapshot
    # Only set when outcome is TERMINATED.
    final_score: Optional[int] = None
    # Set on the tick that beat the previous high score.
    new_high_score: Optional[int] = None
    reason: Optional[str] = None

    @property
    def terminated(self) -> bool:
        return self.outcome is StepOutcome.TERMINATED


def place_food(
    cols: int,
    rows: int,
    snake: Iterable[Sequence[int]],
    rng: random.Random,
    attempts: Optional[int] = None,
) -> Optional[Position]:
    """Draw random cells until one is not occupied by the snake.

    Gives up after ``attempts`` draws and returns None, in which case the game goes on
    without food. This is a known approximation: with a sparse snake the bound is hit
    with negligible probability, but a nearly full grid can miss the last free cells.
    """
    if attempts is None:
        attempts = config.FOOD_PLACEMENT_ATTEMPTS
    occupied = {tuple(s) for s in snake}
    for _ in range(max(1, int(attempts))):
        cell = Position(rng.randrange(cols), rng.randrange(rows))
        if cell not in occupied:
            return cell
    logger.info("No free cell found after %d draws; continuing without food", attempts)
    return None


def place_food_exact(
    cols: int,
    rows: int,
    snake: Iterable[Sequence[int]],
    rng: random.Random,
) -> Optional[Position]:
    """Pick uniformly among the free cells; None only when the snake fills the grid."""
    occupied = {tuple(s) for s in snake}
    free = [Position(x, y) for y in range(rows) for x in range(cols) if (x, y) not in occupied]
    if not free:
        logger.info("No space for food - grid is full")
        return None
    return rng.choice(free)


class GameState:
    """Authoritative model of one snake session.

    Owns the snake, heading, food, score, cached high score, phase and the running-time
    stopwatch. All randomness comes from ``rng`` so sessions are reproducible.
    """

    def __init__(
        self,
        cols: Optional[int] = None,
        rows: Optional[int] = None,
        initial_length: Optional[int] = None,
        *,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
        high_score: int = 0,
        food_strategy: Optional[str] = None,
        food_attempts: Optional[int] = None,
    ) -> None:
        self.seed = seed
        self.rng = rng if rng is not None else random.Random(seed)
        self.stopwatch = Stopwatch(clock)
        self.high_score = max(0, int(high_score))
        self.food_strategy = food_strategy or config.FOOD_STRATEGY
        self.food_attempts = food_attempts
        self.cols = config.GRID_COLS if cols is None else cols
        self.rows = config.GRID_ROWS if rows is None else rows
        self.initial_length = config.INITIAL_LENGTH if initial_length is None else initial_length
        self.reset()

    def reset(
        self,
        cols: Optional[int] = None,
        rows: Optional[int] = None,
        initial_length: Optional[int] = None,
    ) -> Snapshot:
        """Start a fresh session; omitted arguments reuse the previous configuration."""
        self.cols, self.rows = clamp_grid(
            self.cols if cols is None else cols,
            self.rows if rows is None else rows,
        )
        requested = self.initial_length if initial_length is None else initial_length
        self.initial_length = clamp_initial_length(requested, self.cols)
        if self.initial_length != requested:
            logger.debug("Initial length %s clamped to %d", requested, self.initial_length)

        self.snake: Deque[Position] = deque(starting_snake(self.cols, self.rows, self.initial_length))
        self.direction: Direction = INITIAL_DIRECTION
        self.pending_direction: Direction = INITIAL_DIRECTION
        self.score = 0
        self.steps = 0
        self.terminal_reason: Optional[str] = None
        self.phase = Phase.IDLE
        self.stopwatch.clear()
        self.food = self._place_food()
        return self.snapshot()

    def _place_food(self) -> Optional[Position]:
        if self.food_strategy == "exact":
            return place_food_exact(self.cols, self.rows, self.snake, self.rng)
        return place_food(self.cols, self.rows, self.snake, self.rng, self.food_attempts)

    @property
    def elapsed_seconds(self) -> int:
        return self.stopwatch.elapsed_seconds()

    # ----------------------------
    # Input and phase transitions
    # ----------------------------
    def set_direction(self, move: Sequence[int]) -> bool:
        """Queue ``move`` for the next tick unless it reverses the committed heading.

        Only the latest accepted request before a tick is honored. Anything that is not
        one of the four unit vectors is ignored.
        """
        direction = canonical_direction(move)
        if direction is None:
            logger.debug("Ignoring non-unit direction %r", move)
            return False
        if is_reversal(direction, self.direction):
            logger.debug("Ignoring reversal %s while heading %s", direction, self.direction)
            return False
        self.pending_direction = direction
        return True

    def begin(self) -> bool:
        """Enter RUNNING from IDLE, PAUSED or GAME_OVER (the latter resets first)."""
        if self.phase is Phase.RUNNING:
            return False
        if self.phase is Phase.GAME_OVER:
            self.reset()
        self.phase = Phase.RUNNING
        self.stopwatch.start()
        return True

    def suspend(self) -> bool:
        """Enter PAUSED from RUNNING; accumulated time is preserved."""
        if self.phase is not Phase.RUNNING:
            return False
        self.stopwatch.stop()
        self.phase = Phase.PAUSED
        return True

    # ----------------------------
    # Simulation
    # ----------------------------
    def step(self) -> StepResult:
        """Advance one tick.

        Outside RUNNING nothing moves: IDLE and PAUSED report CONTINUED, GAME_OVER keeps
        reporting TERMINATED without touching the high score again.
        """
        if self.phase is Phase.GAME_OVER:
            return self._result(StepOutcome.TERMINATED, final_score=self.score)
        if self.phase is not Phase.RUNNING:
            return self._result(StepOutcome.CONTINUED)

        self.direction = self.pending_direction
        new_head = advance(self.snake[0], self.direction)

        reason = is_fatal(new_head, self.snake, self.cols, self.rows)
        if reason is not None:
            return self._terminate(reason)

        self.snake.appendleft(new_head)
        self.steps += 1

        if self.food is not None and new_head == self.food:
            self.score += 1
            self.food = self._place_food()
            return self._result(StepOutcome.ATE)

        self.snake.pop()
        return self._result(StepOutcome.CONTINUED)

    def _terminate(self, reason: str) -> StepResult:
        self.phase = Phase.GAME_OVER
        self.terminal_reason = reason
        self.stopwatch.stop()

        new_high: Optional[int] = None
        if self.score > self.high_score:
            self.high_score = self.score
            new_high = self.score

        logger.info(
            "Game over (%s): score=%d high=%d steps=%d time=%ds",
            reason,
            self.score,
            self.high_score,
            self.steps,
            self.elapsed_seconds,
        )
        return self._result(
            StepOutcome.TERMINATED,
            final_score=self.score,
            new_high_score=new_high,
            reason=reason,
        )

    def _result(self, outcome: StepOutcome, **kwargs) -> StepResult:
        return StepResult(outcome=outcome, snapshot=self.snapshot(), **kwargs)

    def snapshot(self) -> Snapshot:
        return Snapshot(
            snake=tuple(self.snake),
            food=self.food,
            score=self.score,
            high_score=self.high_score,
            elapsed_seconds=self.elapsed_seconds,
            phase=self.phase,
            direction=self.direction,
            cols=self.cols,
            rows=self.rows,
        )
