"""Central configuration for the snake core and its pygame host."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

# Logging
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)-12s - %(levelname)-8s - %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging if the host application has not done so already.

    This keeps the package library-friendly (it will not override an existing logging setup),
    while preserving CLI ergonomics.
    """
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(level=level, format=DEFAULT_LOG_FORMAT, stream=sys.stdout)


logger = logging.getLogger("gridsnake")


# ----------------------------
# Paths / persistence
# ----------------------------
REPO_ROOT = Path(__file__).resolve().parents[1]


def _default_state_dir() -> Path:
    """Resolve the state directory (supports env override)."""
    raw = os.environ.get("GRIDSNAKE_STATE_DIR")
    if raw:
        return Path(raw).expanduser().resolve()
    return REPO_ROOT / "state"


STATE_DIR = _default_state_dir()
HIGH_SCORE_FILE = str(STATE_DIR / "high_score.msgpack")

# If False, the high score is kept in memory only.
SAVE_HIGH_SCORE = True


def set_state_dir(state_dir: str | Path) -> None:
    """Update the state directory and derived file paths at runtime.

    Used by the CLI and the tests for isolated runs.
    """
    global STATE_DIR, HIGH_SCORE_FILE
    STATE_DIR = Path(state_dir).expanduser().resolve()
    STATE_DIR.mkdir(parents=True, exist_ok=True)
    HIGH_SCORE_FILE = str(STATE_DIR / "high_score.msgpack")


# ----------------------------
# Simulation
# ----------------------------
GRID_COLS = 20
GRID_ROWS = 20
INITIAL_LENGTH = 4
TICK_MS = 120

# Food placement: "sampled" retries random cells, "exact" picks among free cells.
FOOD_STRATEGY = "sampled"
FOOD_PLACEMENT_ATTEMPTS = 1000

# ----------------------------
# Host / rendering
# ----------------------------
CELL_SIZE = 28
HUD_HEIGHT = 40
FPS = 60
SWIPE_THRESHOLD = 20
GAME_OVER_DIALOG_DELAY_MS = 120

# Safety caps / logging (headless runs)
MAX_STEPS_PER_GAME = 20000
PROGRESS_LOG_INTERVAL = 500


def validate_config() -> None:
    """Basic sanity checks."""
    ok = True
    if GRID_COLS < 1 or GRID_ROWS < 1:
        logger.error("GRID_COLS and GRID_ROWS must be >= 1")
        ok = False
    if INITIAL_LENGTH < 1:
        logger.error("INITIAL_LENGTH must be >= 1")
        ok = False
    if TICK_MS <= 0:
        logger.error("TICK_MS must be > 0")
        ok = False
    if FOOD_STRATEGY not in ("sampled", "exact"):
        logger.error("FOOD_STRATEGY must be 'sampled' or 'exact'")
        ok = False
    if FOOD_PLACEMENT_ATTEMPTS < 1:
        logger.error("FOOD_PLACEMENT_ATTEMPTS must be >= 1")
        ok = False
    if MAX_STEPS_PER_GAME < 1:
        logger.error("MAX_STEPS_PER_GAME must be >= 1")
        ok = False
    if not ok:
        raise SystemExit(1)
