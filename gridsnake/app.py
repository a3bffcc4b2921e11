"""pygame host: window, HUD, "Press Start" overlay and the game-over dialog."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from . import config
from .controls import Command, command_for_key, direction_for, swipe_command
from .game import Phase, Snapshot
from .loop import GameLoop, GameOverEvent
from .scheduler import PygameScheduler
from .utils import format_time, import_pygame, segment_age_ratio

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

BACKGROUND: Color = (20, 20, 30)
GRID_LINE: Color = (32, 32, 44)
FOOD: Color = (232, 93, 74)
HEAD: Color = (159, 230, 106)
BODY: Color = (91, 185, 79)
TAIL: Color = (40, 110, 45)
TEXT: Color = (235, 235, 240)


@dataclass
class GameOverDialog:
    visible: bool = False
    final_score: int = 0
    high_score: int = 0
    show_at_ms: Optional[int] = None

    def schedule(self, event: GameOverEvent, now_ms: int, delay_ms: int) -> None:
        self.final_score = event.final_score
        self.high_score = event.high_score
        self.show_at_ms = now_ms + delay_ms

    def update(self, now_ms: int) -> None:
        if self.show_at_ms is not None and now_ms >= self.show_at_ms:
            self.visible = True
            self.show_at_ms = None

    def hide(self) -> None:
        self.visible = False
        self.show_at_ms = None


def apply_command(loop: GameLoop, dialog: GameOverDialog, command: Command) -> bool:
    """Route one input command to the loop; returns False when the host should quit."""
    direction = direction_for(command)
    if direction is not None:
        loop.set_direction(*direction)
        return True

    if command is Command.QUIT:
        return False
    if command is Command.TOGGLE:
        dialog.hide()
        loop.toggle()
    elif command is Command.PAUSE:
        loop.pause()
    elif command is Command.RESET:
        dialog.hide()
        loop.reset()
    elif command is Command.RESTART:
        if dialog.visible or loop.phase is Phase.GAME_OVER:
            dialog.hide()
            loop.restart()
        else:
            loop.start()
    elif command is Command.DISMISS:
        dialog.hide()
    return True


def pointer_command(dialog: GameOverDialog, dx: float, dy: float) -> Optional[Command]:
    """Command for a finished drag: a swipe direction, or a dismiss when a click lands on the open dialog."""
    command = swipe_command(dx, dy)
    if command is None and dialog.visible:
        return Command.DISMISS
    return command


def _lerp_color(start: Color, end: Color, ratio: float) -> Color:
    ratio = max(0.0, min(1.0, ratio))
    return (
        int(start[0] + (end[0] - start[0]) * ratio),
        int(start[1] + (end[1] - start[1]) * ratio),
        int(start[2] + (end[2] - start[2]) * ratio),
    )


class Renderer:
    """Draws snapshots onto a pygame surface; never calls back into the loop."""

    def __init__(self, pygame_module: Any, screen: Any, cell_size: int, hud_height: int) -> None:
        self.pygame = pygame_module
        self.screen = screen
        self.cell = cell_size
        self.hud_height = hud_height
        self.font = pygame_module.font.SysFont("Arial", 20, bold=True)
        self.small_font = pygame_module.font.SysFont("Arial", 16)

    def _cell_rect(self, x: int, y: int) -> Any:
        return self.pygame.Rect(
            x * self.cell + 1,
            self.hud_height + y * self.cell + 1,
            self.cell - 2,
            self.cell - 2,
        )

    def draw(self, snapshot: Snapshot, dialog: GameOverDialog) -> None:
        pg = self.pygame
        board_w = snapshot.cols * self.cell
        board_h = snapshot.rows * self.cell
        self.screen.fill(BACKGROUND)

        for x in range(0, board_w + 1, self.cell):
            pg.draw.line(self.screen, GRID_LINE, (x, self.hud_height), (x, self.hud_height + board_h))
        for y in range(0, board_h + 1, self.cell):
            pg.draw.line(self.screen, GRID_LINE, (0, self.hud_height + y), (board_w, self.hud_height + y))

        if snapshot.food is not None:
            pg.draw.rect(self.screen, FOOD, self._cell_rect(*snapshot.food), border_radius=6)

        length = len(snapshot.snake)
        # Tail first so the head is painted on top.
        for i in range(length - 1, -1, -1):
            x, y = snapshot.snake[i]
            color = HEAD if i == 0 else _lerp_color(BODY, TAIL, segment_age_ratio(i, length))
            pg.draw.rect(self.screen, color, self._cell_rect(x, y), border_radius=4)

        hud = (
            f"Score: {snapshot.score}    High: {snapshot.high_score}"
            f"    Time: {format_time(snapshot.elapsed_seconds)}"
        )
        self.screen.blit(self.font.render(hud, True, TEXT), (10, (self.hud_height - 24) // 2))

        if dialog.visible:
            self._draw_dialog(board_w, board_h, dialog)
        elif snapshot.phase is not Phase.RUNNING:
            self._draw_overlay(board_w, board_h, "Press Start (Space)")

        pg.display.flip()

    def _dim(self, board_w: int, board_h: int, alpha: int) -> None:
        overlay = self.pygame.Surface((board_w, board_h))
        overlay.set_alpha(alpha)
        overlay.fill((0, 0, 0))
        self.screen.blit(overlay, (0, self.hud_height))

    def _draw_overlay(self, board_w: int, board_h: int, message: str) -> None:
        self._dim(board_w, board_h, 90)
        text = self.small_font.render(message, True, TEXT)
        rect = text.get_rect(center=(board_w // 2, self.hud_height + board_h // 2))
        self.screen.blit(text, rect)

    def _draw_dialog(self, board_w: int, board_h: int, dialog: GameOverDialog) -> None:
        self._dim(board_w, board_h, 160)
        lines = [
            (self.font, "Game Over"),
            (self.small_font, f"Score: {dialog.final_score}"),
            (self.small_font, f"High Score: {dialog.high_score}"),
            (self.small_font, "Enter = Restart    Esc = Close"),
        ]
        center_x = board_w // 2
        top = self.hud_height + board_h // 2 - len(lines) * 14
        for idx, (font, line) in enumerate(lines):
            text = font.render(line, True, TEXT)
            self.screen.blit(text, text.get_rect(center=(center_x, top + idx * 28)))


class GameApp:
    """Windowed host: turns pygame events into commands and redraws every frame."""

    def __init__(self, loop_factory: Any, cols: int, rows: int, cell_size: Optional[int] = None) -> None:
        self.pygame = import_pygame()
        self.pygame.init()
        self.cell = int(cell_size or config.CELL_SIZE)
        self.screen = self.pygame.display.set_mode(
            (max(1, cols) * self.cell, max(1, rows) * self.cell + config.HUD_HEIGHT)
        )
        self.pygame.display.set_caption("Snake")
        self.clock = self.pygame.time.Clock()
        self.scheduler = PygameScheduler(self.pygame)
        self.loop: GameLoop = loop_factory(self.scheduler)
        self.renderer = Renderer(self.pygame, self.screen, self.cell, config.HUD_HEIGHT)
        self.dialog = GameOverDialog()
        self._drag_start: Optional[Tuple[float, float]] = None
        self.loop.add_game_over_listener(self._on_game_over)
        logger.info("Window opened for a %dx%d grid (%dpx cells)", cols, rows, self.cell)

    def _on_game_over(self, event: GameOverEvent) -> None:
        self.dialog.schedule(event, self.pygame.time.get_ticks(), config.GAME_OVER_DIALOG_DELAY_MS)

    def _swipe(self, end: Tuple[float, float]) -> Optional[Command]:
        if self._drag_start is None:
            return None
        dx = end[0] - self._drag_start[0]
        dy = end[1] - self._drag_start[1]
        self._drag_start = None
        return pointer_command(self.dialog, dx, dy)

    def handle_events(self) -> bool:
        pg = self.pygame
        width, height = self.screen.get_size()
        for event in pg.event.get():
            if self.scheduler.dispatch(event):
                continue
            command: Optional[Command] = None
            if event.type == pg.QUIT:
                return False
            if event.type == pg.KEYDOWN:
                command = command_for_key(pg.key.name(event.key))
            elif event.type == pg.MOUSEBUTTONDOWN:
                self._drag_start = event.pos
            elif event.type == pg.MOUSEBUTTONUP:
                command = self._swipe(event.pos)
            elif event.type == pg.FINGERDOWN:
                self._drag_start = (event.x * width, event.y * height)
            elif event.type == pg.FINGERUP:
                command = self._swipe((event.x * width, event.y * height))
            if command is not None and not apply_command(self.loop, self.dialog, command):
                return False
        return True

    def run(self) -> None:
        try:
            while self.handle_events():
                self.dialog.update(self.pygame.time.get_ticks())
                self.renderer.draw(self.loop.snapshot(), self.dialog)
                self.clock.tick(config.FPS)
        finally:
            self.loop.close()
            self.pygame.quit()
