from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd


def describe(path: Path, label: str) -> None:
    if not path.exists():
        print(f"warning: {path} not found")
        return
    df = pd.read_json(path, lines=True)
    cols = ["score", "high_score", "steps", "elapsed_seconds", "length"]
    print(f"\n--- {label} ({path.name}) ---")
    print(df[cols].describe())
    print("\noutcomes:")
    print(df["outcome"].value_counts().to_string())
    total_steps = df["steps"].sum()
    if total_steps:
        rate = df["score"].sum() / total_steps
        print(f"food per step: {rate:.4f} ({df['score'].sum()} food / {total_steps} steps)")


def main() -> None:
    parser = argparse.ArgumentParser(description="Describe JSONL session logs written with --log-jsonl")
    parser.add_argument(
        "logs",
        type=Path,
        nargs="*",
        default=[Path("runs/session.jsonl")],
        help="Session logs to summarize",
    )
    args = parser.parse_args()

    for path in args.logs:
        describe(path, path.stem)


if __name__ == "__main__":
    main()
