from __future__ import annotations

from typing import Any, NamedTuple, Optional, Sequence, Tuple

Direction = Tuple[int, int]


class Position(NamedTuple):
    x: int
    y: int


RIGHT: Direction = (1, 0)
LEFT: Direction = (-1, 0)
DOWN: Direction = (0, 1)
UP: Direction = (0, -1)

DIRECTIONS: Sequence[Direction] = (RIGHT, LEFT, DOWN, UP)
INITIAL_DIRECTION: Direction = RIGHT


def canonical_direction(move: Any) -> Optional[Direction]:
    """Return the matching entry of DIRECTIONS, or None for anything else.

    Equal-comparing look-alikes such as ``(0.0, -1.0)`` or ``(True, False)`` map to the
    integer vector, so only ints ever reach the snake.
    """
    try:
        candidate = tuple(move)
    except TypeError:
        return None
    for direction in DIRECTIONS:
        if candidate == direction:
            return direction
    return None


def is_reversal(move: Direction, direction: Direction) -> bool:
    return move == (-direction[0], -direction[1])


def in_bounds(cell: Sequence[int], cols: int, rows: int) -> bool:
    x, y = cell
    return 0 <= x < cols and 0 <= y < rows


def advance(cell: Sequence[int], move: Direction) -> Position:
    return Position(cell[0] + move[0], cell[1] + move[1])


def clamp_grid(cols: int, rows: int) -> Tuple[int, int]:
    """Normalize grid dimensions: anything below 1 becomes 1."""
    return max(1, int(cols)), max(1, int(rows))


def clamp_initial_length(initial_length: int, cols: int) -> int:
    """Largest length that fits between the centered head and the left wall.

    The head sits on column ``cols // 2`` and the body extends towards x=0, so at most
    ``cols // 2 + 1`` segments fit without leaving the grid or overlapping. This is
    tighter than ``min(initial_length, cols)``, which would let the tail run past the
    left wall to negative x on any grid where ``initial_length > cols // 2 + 1``.
    """
    return max(1, min(int(initial_length), cols // 2 + 1))


def starting_snake(cols: int, rows: int, length: int) -> list[Position]:
    head_x, head_y = cols // 2, rows // 2
    return [Position(head_x - i, head_y) for i in range(length)]


def is_fatal(new_head: Sequence[int], snake: Sequence[Sequence[int]], cols: int, rows: int) -> Optional[str]:
    """Return the collision reason for moving the head onto ``new_head``, or None.

    The whole pre-move body counts, tail included: the tail only vacates its cell when
    the snake does not eat, and the check happens before that is known.
    """
    if not in_bounds(new_head, cols, rows):
        return "wall"
    if tuple(new_head) in {tuple(s) for s in snake}:
        return "self"
    return None


def safe_directions(
    snake: Sequence[Sequence[int]],
    direction: Direction,
    cols: int,
    rows: int,
) -> list[Direction]:
    """Directions that neither reverse the heading nor end the game on the next tick.

    Uses a set of occupied cells to avoid repeated O(n) membership checks.
    """
    if not snake:
        return []

    head = snake[0]
    occupied = {tuple(s) for s in snake}

    moves: list[Direction] = []
    for move in DIRECTIONS:
        if is_reversal(move, direction):
            continue
        new_head = advance(head, move)
        if not in_bounds(new_head, cols, rows):
            continue
        if new_head in occupied:
            continue
        moves.append(move)
    return moves
