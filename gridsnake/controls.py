"""Map physical input (key names, swipe gestures) to game commands."""

from __future__ import annotations

import enum
from typing import Optional

from . import config
from .rules import DOWN, LEFT, RIGHT, UP, Direction


class Command(enum.Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    TOGGLE = "toggle"
    PAUSE = "pause"
    RESET = "reset"
    RESTART = "restart"
    DISMISS = "dismiss"
    QUIT = "quit"


COMMAND_DIRECTIONS = {
    Command.UP: UP,
    Command.DOWN: DOWN,
    Command.LEFT: LEFT,
    Command.RIGHT: RIGHT,
}

# Keys are pygame.key.name() values.
KEY_COMMANDS = {
    "up": Command.UP,
    "w": Command.UP,
    "down": Command.DOWN,
    "s": Command.DOWN,
    "left": Command.LEFT,
    "a": Command.LEFT,
    "right": Command.RIGHT,
    "d": Command.RIGHT,
    "space": Command.TOGGLE,
    "p": Command.PAUSE,
    "r": Command.RESET,
    "return": Command.RESTART,
    "enter": Command.RESTART,
    "escape": Command.DISMISS,
    "q": Command.QUIT,
}


def command_for_key(key_name: str) -> Optional[Command]:
    return KEY_COMMANDS.get(key_name.lower())


def direction_for(command: Command) -> Optional[Direction]:
    return COMMAND_DIRECTIONS.get(command)


def swipe_command(dx: float, dy: float, threshold: Optional[float] = None) -> Optional[Command]:
    """Turn a drag vector into a direction along its dominant axis.

    Drags no longer than ``threshold`` pixels on that axis are ignored. Screen y grows
    downwards, like grid rows.
    """
    if threshold is None:
        threshold = config.SWIPE_THRESHOLD
    if abs(dx) > abs(dy):
        if dx > threshold:
            return Command.RIGHT
        if dx < -threshold:
            return Command.LEFT
        return None
    if dy > threshold:
        return Command.DOWN
    if dy < -threshold:
        return Command.UP
    return None
