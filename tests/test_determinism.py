from __future__ import annotations

import json
import os
import shutil
import unittest
import uuid

from gridsnake.cli import run


class DeterminismTest(unittest.TestCase):
    def _run_rows(self, seed: int, log_path: str, state_dir: str) -> list[tuple]:
        rc = run(
            num_games=3,
            render=False,
            seed=seed,
            cols=12,
            rows=12,
            max_steps=400,
            log_jsonl=log_path,
            state_dir=state_dir,
            no_save=True,
        )
        self.assertEqual(rc, 0)
        with open(log_path, encoding="utf-8") as fh:
            rows = [json.loads(line) for line in fh]
        return [(r["score"], r["steps"], r["elapsed_seconds"], r["outcome"]) for r in rows]

    def test_headless_runs_are_deterministic(self):
        tmp_root = os.path.abspath(
            os.path.join(os.getcwd(), f"tmp-determinism-{uuid.uuid4().hex}")
        )
        os.makedirs(tmp_root, exist_ok=True)
        try:
            results = []
            for run_id in range(2):
                log_path = os.path.join(tmp_root, f"run{run_id}.jsonl")
                results.append(self._run_rows(2026, log_path, tmp_root))
            self.assertEqual(len(results[0]), 3)
            self.assertEqual(results[0], results[1])
        finally:
            shutil.rmtree(tmp_root, ignore_errors=True)
