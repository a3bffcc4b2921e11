"""Scripted input source for headless runs: steer greedily towards the food."""

from __future__ import annotations

import random
from typing import Optional

from .game import Snapshot
from .rules import Direction, advance, safe_directions


class Autopilot:
    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else random.Random(seed)
        self.forced = 0

    def choose(self, snapshot: Snapshot) -> Direction:
        """Pick the safe direction that brings the head closest to the food.

        Ties are broken with the autopilot's own RNG. With no safe move left the
        current heading is kept and the game ends on the next tick.
        """
        moves = safe_directions(snapshot.snake, snapshot.direction, snapshot.cols, snapshot.rows)
        if not moves:
            self.forced += 1
            return snapshot.direction

        food = snapshot.food
        if food is None:
            return self.rng.choice(moves)

        head = snapshot.snake[0]

        def distance(move: Direction) -> int:
            nxt = advance(head, move)
            return abs(nxt.x - food[0]) + abs(nxt.y - food[1])

        best = min(distance(m) for m in moves)
        return self.rng.choice([m for m in moves if distance(m) == best])
