from __future__ import annotations

import unittest
from collections import deque

from gridsnake.autopilot import Autopilot
from gridsnake.game import GameState, Phase, StepOutcome
from gridsnake.rules import DIRECTIONS, DOWN, LEFT, RIGHT, UP, Position


def _arrange(state, snake, direction=RIGHT, food=None):
    state.begin()
    state.snake = deque(Position(*s) for s in snake)
    state.direction = direction
    state.pending_direction = direction
    state.food = Position(*food) if food is not None else None


class ResetTest(unittest.TestCase):
    def test_reset_centers_horizontal_snake(self):
        state = GameState(10, 10, 4, seed=0)
        self.assertEqual(list(state.snake), [(5, 5), (4, 5), (3, 5), (2, 5)])
        self.assertEqual(state.direction, (1, 0))
        self.assertEqual(state.score, 0)
        self.assertEqual(state.phase, Phase.IDLE)
        self.assertEqual(state.elapsed_seconds, 0)
        self.assertIsNotNone(state.food)
        self.assertNotIn(state.food, state.snake)

    def test_reset_clamps_length_to_fit_left_of_head(self):
        state = GameState(10, 10, 50, seed=0)
        self.assertEqual(len(state.snake), 6)
        self.assertEqual(state.snake[-1], (0, 5))
        self.assertEqual(len(set(state.snake)), len(state.snake))

    def test_reset_clamps_non_positive_dimensions(self):
        state = GameState(0, -3, 4, seed=0, food_attempts=10)
        self.assertEqual((state.cols, state.rows), (1, 1))
        self.assertEqual(list(state.snake), [(0, 0)])
        self.assertIsNone(state.food)

    def test_reset_replaces_previous_session(self):
        state = GameState(10, 10, 4, seed=1)
        _arrange(state, [(1, 1), (0, 1)], food=(2, 1))
        state.step()
        self.assertEqual(state.score, 1)

        state.reset(12, 8, 3)
        self.assertEqual(list(state.snake), [(6, 4), (5, 4), (4, 4)])
        self.assertEqual(state.score, 0)
        self.assertEqual(state.phase, Phase.IDLE)


class StepScenarioTest(unittest.TestCase):
    def test_single_step_moves_without_growth(self):
        state = GameState(10, 10, 4, seed=0)
        _arrange(state, [(5, 5), (4, 5), (3, 5), (2, 5)], food=(0, 0))

        result = state.step()

        self.assertEqual(result.outcome, StepOutcome.CONTINUED)
        self.assertEqual(list(state.snake), [(6, 5), (5, 5), (4, 5), (3, 5)])
        self.assertEqual(state.score, 0)
        self.assertEqual(result.snapshot.phase, Phase.RUNNING)

    def test_eating_keeps_tail_and_replaces_food(self):
        state = GameState(10, 10, 4, seed=0)
        _arrange(state, [(5, 5), (4, 5), (3, 5), (2, 5)], food=(6, 5))

        result = state.step()

        self.assertEqual(result.outcome, StepOutcome.ATE)
        self.assertEqual(list(state.snake), [(6, 5), (5, 5), (4, 5), (3, 5), (2, 5)])
        self.assertEqual(state.score, 1)
        self.assertIsNotNone(state.food)
        self.assertNotIn(state.food, state.snake)

    def test_snapshot_is_detached_from_state(self):
        state = GameState(10, 10, 4, seed=0)
        _arrange(state, [(5, 5), (4, 5)], food=(0, 0))
        before = state.snapshot()
        state.step()
        self.assertEqual(before.snake, ((5, 5), (4, 5)))


class CollisionTest(unittest.TestCase):
    def test_corner_moving_right_hits_wall(self):
        state = GameState(10, 10, 4, seed=0)
        _arrange(state, [(9, 9), (8, 9), (7, 9)], food=(0, 0))

        result = state.step()

        self.assertEqual(result.outcome, StepOutcome.TERMINATED)
        self.assertEqual(result.reason, "wall")
        self.assertEqual(state.phase, Phase.GAME_OVER)
        self.assertEqual(list(state.snake), [(9, 9), (8, 9), (7, 9)])

    def test_walls_never_wrap(self):
        cases = [((0, 5), LEFT), ((9, 5), RIGHT), ((5, 0), UP), ((5, 9), DOWN)]
        for head, direction in cases:
            with self.subTest(head=head, direction=direction):
                state = GameState(10, 10, 1, seed=0)
                _arrange(state, [head], direction=direction, food=None)
                result = state.step()
                self.assertTrue(result.terminated)
                self.assertEqual(result.reason, "wall")
                self.assertTrue(all(0 <= x < 10 and 0 <= y < 10 for x, y in state.snake))

    def test_head_into_body_terminates(self):
        state = GameState(10, 10, 4, seed=0)
        _arrange(state, [(5, 5), (6, 5), (6, 6), (5, 6), (4, 6)], direction=LEFT, food=(0, 0))

        self.assertTrue(state.set_direction(DOWN))
        result = state.step()

        self.assertEqual(result.outcome, StepOutcome.TERMINATED)
        self.assertEqual(result.reason, "self")

    def test_head_into_current_tail_terminates(self):
        state = GameState(10, 10, 4, seed=0)
        _arrange(state, [(5, 5), (6, 5), (6, 6), (5, 6)], direction=LEFT, food=(0, 0))

        state.set_direction(DOWN)
        result = state.step()

        self.assertTrue(result.terminated)
        self.assertEqual(result.reason, "self")


class DirectionTest(unittest.TestCase):
    def test_reversal_is_ignored(self):
        for direction in DIRECTIONS:
            with self.subTest(direction=direction):
                state = GameState(10, 10, 1, seed=0)
                _arrange(state, [(5, 5)], direction=direction, food=None)
                opposite = (-direction[0], -direction[1])

                self.assertFalse(state.set_direction(opposite))
                state.step()

                self.assertEqual(state.snake[0], (5 + direction[0], 5 + direction[1]))

    def test_two_quick_turns_cannot_add_up_to_reversal(self):
        state = GameState(10, 10, 4, seed=0)
        _arrange(state, [(5, 5), (4, 5), (3, 5)], food=(0, 0))

        self.assertTrue(state.set_direction(UP))
        self.assertFalse(state.set_direction(LEFT))
        result = state.step()

        self.assertFalse(result.terminated)
        self.assertEqual(state.snake[0], (5, 4))

    def test_latest_pending_direction_wins(self):
        state = GameState(10, 10, 4, seed=0)
        _arrange(state, [(5, 5), (4, 5), (3, 5)], food=(0, 0))

        state.set_direction(UP)
        state.set_direction(DOWN)
        state.step()

        self.assertEqual(state.snake[0], (5, 6))
        self.assertEqual(state.direction, DOWN)

    def test_non_unit_directions_are_ignored(self):
        state = GameState(10, 10, 4, seed=0)
        self.assertFalse(state.set_direction((1, 1)))
        self.assertFalse(state.set_direction((0, 0)))
        self.assertFalse(state.set_direction((2, 0)))
        self.assertEqual(state.pending_direction, RIGHT)

    def test_malformed_directions_are_ignored(self):
        state = GameState(10, 10, 4, seed=0)
        self.assertFalse(state.set_direction(None))
        self.assertFalse(state.set_direction(7))
        self.assertFalse(state.set_direction("up"))
        self.assertEqual(state.pending_direction, RIGHT)

    def test_look_alike_directions_are_stored_as_ints(self):
        state = GameState(10, 10, 4, seed=0)
        _arrange(state, [(5, 5), (4, 5), (3, 5)], food=(0, 0))

        self.assertTrue(state.set_direction((True, False)))
        self.assertEqual([type(v) for v in state.pending_direction], [int, int])
        self.assertTrue(state.set_direction((0.0, -1.0)))
        self.assertEqual([type(v) for v in state.pending_direction], [int, int])
        state.step()

        self.assertEqual(state.snake[0], (5, 4))
        self.assertEqual([type(v) for v in state.snake[0]], [int, int])


class PhaseTest(unittest.TestCase):
    def test_step_outside_running_does_not_move(self):
        state = GameState(10, 10, 4, seed=0)
        before = list(state.snake)

        self.assertEqual(state.step().outcome, StepOutcome.CONTINUED)
        state.begin()
        state.suspend()
        self.assertEqual(state.step().outcome, StepOutcome.CONTINUED)
        self.assertEqual(list(state.snake), before)

    def test_game_over_is_sticky_without_side_effects(self):
        state = GameState(10, 10, 4, seed=0, high_score=0)
        _arrange(state, [(9, 5)], food=None)
        state.score = 4

        first = state.step()
        second = state.step()

        self.assertEqual(first.new_high_score, 4)
        self.assertEqual(second.outcome, StepOutcome.TERMINATED)
        self.assertEqual(second.final_score, 4)
        self.assertIsNone(second.new_high_score)

    def test_begin_after_game_over_resets(self):
        state = GameState(10, 10, 4, seed=0)
        _arrange(state, [(9, 5)], food=None)
        state.score = 2
        state.step()

        self.assertTrue(state.begin())
        self.assertEqual(state.phase, Phase.RUNNING)
        self.assertEqual(state.score, 0)
        self.assertEqual(len(state.snake), 4)

    def test_high_score_only_moves_up(self):
        state = GameState(10, 10, 4, seed=0, high_score=3)
        _arrange(state, [(9, 5)], food=None)
        state.score = 1

        result = state.step()

        self.assertIsNone(result.new_high_score)
        self.assertEqual(result.snapshot.high_score, 3)
        self.assertEqual(result.final_score, 1)


class ElapsedTimeTest(unittest.TestCase):
    def test_time_accumulates_only_while_running(self):
        now = [0.0]
        state = GameState(30, 10, 4, seed=0, clock=lambda: now[0])

        state.begin()
        now[0] = 2.5
        self.assertEqual(state.elapsed_seconds, 2)
        state.suspend()
        now[0] = 10.0
        self.assertEqual(state.elapsed_seconds, 2)
        state.begin()
        now[0] = 11.6
        self.assertEqual(state.elapsed_seconds, 4)

        state.reset()
        self.assertEqual(state.elapsed_seconds, 0)

    def test_time_freezes_at_game_over(self):
        now = [0.0]
        state = GameState(10, 10, 4, seed=0, clock=lambda: now[0])
        _arrange(state, [(9, 5)], food=None)
        now[0] = 3.2
        result = state.step()
        now[0] = 50.0

        self.assertEqual(result.snapshot.elapsed_seconds, 3)
        self.assertEqual(state.snapshot().elapsed_seconds, 3)


class GrowthInvariantTest(unittest.TestCase):
    def test_length_changes_only_when_eating(self):
        state = GameState(10, 10, 4, seed=11)
        pilot = Autopilot(seed=11)
        state.begin()
        ate = 0

        for _ in range(2000):
            before = len(state.snake)
            state.set_direction(pilot.choose(state.snapshot()))
            result = state.step()
            if result.terminated:
                break
            if result.outcome is StepOutcome.ATE:
                ate += 1
                self.assertEqual(len(state.snake), before + 1)
            else:
                self.assertEqual(len(state.snake), before)
            self.assertEqual(len(set(state.snake)), len(state.snake))
            if state.food is not None:
                self.assertNotIn(state.food, state.snake)

        self.assertEqual(state.score, ate)
        self.assertGreater(ate, 0)


if __name__ == "__main__":
    unittest.main()
