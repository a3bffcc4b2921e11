"""Command-line interface: windowed play or headless autopilot sessions."""

from __future__ import annotations

import argparse
import cProfile
import json
import logging
import os
import pstats
import time
from pathlib import Path
from typing import Optional

from . import config
from .autopilot import Autopilot
from .game import GameState, Phase
from .loop import GameLoop
from .persistence import HighScoreStore
from .scheduler import ManualScheduler

logger = logging.getLogger(__name__)


def _open_jsonl(path: Optional[str]):
    if not path:
        return None
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p.open("a", encoding="utf-8")


def _run_headless(
    num_games: int,
    seed: Optional[int],
    cols: int,
    rows: int,
    initial_length: int,
    tick_ms: int,
    log_jsonl: Optional[str],
) -> int:
    scheduler = ManualScheduler()
    state = GameState(cols, rows, initial_length, seed=seed, clock=scheduler.clock)
    loop = GameLoop(state, scheduler, HighScoreStore(), tick_ms=tick_ms)
    autopilot = Autopilot(seed=seed)

    scores: list[int] = []
    total_steps = 0
    t0 = time.time()
    jsonl_f = _open_jsonl(log_jsonl)

    try:
        for i in range(num_games):
            loop.reset()
            loop.start()
            steps_this_game = 0
            capped = False

            while loop.phase is Phase.RUNNING:
                if steps_this_game >= config.MAX_STEPS_PER_GAME:
                    logger.info(
                        "Reached per-game step cap (%d); ending game",
                        config.MAX_STEPS_PER_GAME,
                    )
                    loop.pause()
                    capped = True
                    break

                loop.set_direction(*autopilot.choose(loop.snapshot()))
                scheduler.advance(loop.tick_ms)
                steps_this_game += 1
                total_steps += 1

                if steps_this_game % config.PROGRESS_LOG_INTERVAL == 0:
                    snap = loop.snapshot()
                    logger.info(
                        "Game %d | Step %d | Score %d | Time %ds",
                        i + 1,
                        steps_this_game,
                        snap.score,
                        snap.elapsed_seconds,
                    )

            snap = loop.snapshot()
            scores.append(snap.score)
            outcome = "capped" if capped else (state.terminal_reason or "unknown")
            logger.info(
                "Game %d/%d: Score=%d High=%d Steps=%d Time=%ds (%s)",
                i + 1,
                num_games,
                snap.score,
                snap.high_score,
                steps_this_game,
                snap.elapsed_seconds,
                outcome,
            )
            if jsonl_f is not None:
                row = {
                    "ts": time.time(),
                    "game": i + 1,
                    "score": snap.score,
                    "high_score": snap.high_score,
                    "steps": steps_this_game,
                    "elapsed_seconds": snap.elapsed_seconds,
                    "outcome": outcome,
                    "length": len(snap.snake),
                    "seed": seed,
                    "cols": snap.cols,
                    "rows": snap.rows,
                }
                jsonl_f.write(json.dumps(row) + "\n")
                jsonl_f.flush()

        if scores:
            logger.info(
                "Session: avg=%.2f max=%d games=%d total_steps=%d forced=%d (%.2fs)",
                sum(scores) / len(scores),
                max(scores),
                len(scores),
                total_steps,
                autopilot.forced,
                time.time() - t0,
            )
        return 0
    finally:
        loop.close()
        if jsonl_f is not None:
            jsonl_f.close()


def _run_windowed(
    seed: Optional[int],
    cols: int,
    rows: int,
    initial_length: int,
    tick_ms: int,
) -> int:
    from .app import GameApp

    def make_loop(scheduler) -> GameLoop:
        state = GameState(cols, rows, initial_length, seed=seed, clock=scheduler.clock)
        return GameLoop(state, scheduler, HighScoreStore(), tick_ms=tick_ms)

    GameApp(make_loop, cols, rows).run()
    return 0


def run(
    num_games: int,
    render: bool,
    seed: Optional[int],
    cols: Optional[int] = None,
    rows: Optional[int] = None,
    initial_length: Optional[int] = None,
    tick_ms: Optional[int] = None,
    max_steps: Optional[int] = None,
    log_jsonl: Optional[str] = None,
    state_dir: Optional[str] = None,
    no_save: bool = False,
    reset_high_score: bool = False,
    food_strategy: Optional[str] = None,
) -> int:
    config_snapshot = {
        "SAVE_HIGH_SCORE": config.SAVE_HIGH_SCORE,
        "MAX_STEPS_PER_GAME": config.MAX_STEPS_PER_GAME,
        "TICK_MS": config.TICK_MS,
        "FOOD_STRATEGY": config.FOOD_STRATEGY,
        "STATE_DIR": config.STATE_DIR,
        "HIGH_SCORE_FILE": config.HIGH_SCORE_FILE,
    }
    if state_dir:
        config.set_state_dir(state_dir)

    if reset_high_score:
        if HighScoreStore().clear():
            logger.info("High score reset via CLI")

    # Evaluation mode: allow loading, but disable writes.
    if no_save:
        config.SAVE_HIGH_SCORE = False

    if max_steps is not None:
        config.MAX_STEPS_PER_GAME = int(max_steps)
    if tick_ms is not None:
        config.TICK_MS = int(tick_ms)
    if food_strategy is not None:
        config.FOOD_STRATEGY = food_strategy

    try:
        config.validate_config()

        cols = config.GRID_COLS if cols is None else cols
        rows = config.GRID_ROWS if rows is None else rows
        initial_length = config.INITIAL_LENGTH if initial_length is None else initial_length

        if render:
            return _run_windowed(seed, cols, rows, initial_length, config.TICK_MS)
        return _run_headless(num_games, seed, cols, rows, initial_length, config.TICK_MS, log_jsonl)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    finally:
        for attr, value in config_snapshot.items():
            setattr(config, attr, value)


def main(argv: Optional[list[str]] = None) -> int:
    # Ensure pygame banner stays hidden even when importing via `gridsnake.cli`.
    os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
    config.configure_logging()

    parser = argparse.ArgumentParser(description="Grid snake")
    parser.add_argument("--num-games", "--games", type=int, default=10, help="Number of headless games to run")
    parser.add_argument("--no-render", action="store_true", help="Run headless with the autopilot")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--cols", type=int, default=None, help="Grid columns (clamped to >= 1)")
    parser.add_argument("--rows", type=int, default=None, help="Grid rows (clamped to >= 1)")
    parser.add_argument("--initial-length", type=int, default=None, help="Starting snake length")
    parser.add_argument("--tick-ms", type=int, default=None, help="Milliseconds per simulation tick")
    parser.add_argument("--max-steps", type=int, default=None, help="Per-game step cap for headless runs")
    parser.add_argument(
        "--food-strategy",
        choices=("sampled", "exact"),
        default=None,
        help="Random retries (sampled) or uniform choice among free cells (exact)",
    )
    parser.add_argument("--profile", action="store_true", help="Enable profiling output")
    parser.add_argument(
        "--log-jsonl",
        type=str,
        default=None,
        help="Append per-game results to a JSONL file (e.g. runs/session.jsonl)",
    )
    parser.add_argument(
        "--state-dir",
        type=str,
        default=None,
        help="Override state directory (default: state/). Useful for isolated runs.",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Do not write the high score to disk (evaluation mode).",
    )
    parser.add_argument(
        "--reset-high-score",
        action="store_true",
        help="Delete the persisted high score (state/high_score.msgpack) before running.",
    )

    args = parser.parse_args(argv)

    def _run() -> int:
        return run(
            num_games=args.num_games,
            render=not args.no_render,
            seed=args.seed,
            cols=args.cols,
            rows=args.rows,
            initial_length=args.initial_length,
            tick_ms=args.tick_ms,
            max_steps=args.max_steps,
            log_jsonl=args.log_jsonl,
            state_dir=args.state_dir,
            no_save=args.no_save,
            reset_high_score=args.reset_high_score,
            food_strategy=args.food_strategy,
        )

    if args.profile:
        profiler = cProfile.Profile()
        profiler.enable()
        rc = _run()
        profiler.disable()
        stats = pstats.Stats(profiler).sort_stats("cumulative")
        print("\n=== Profiling Results ===")
        stats.print_stats(30)
        return rc

    return _run()
