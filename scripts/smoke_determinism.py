#!/usr/bin/env python3
"""Smoke-test that schedule reports do not depend on rule order."""

from __future__ import annotations

import random
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from planner.orchestrator import load_rules, run_plan

_RULES = ROOT / "tests" / "data" / "example_rules.txt"
_EXPECTED = {"order": "CABDFE", "duration": 253}


def main() -> int:
    lines = load_rules(_RULES)
    overrides = {"CLI_PLANNER_SEED_ALPHABET": "0"}
    rng = random.Random(7)

    for mode, expected in _EXPECTED.items():
        baseline = run_plan(lines, mode=mode, env_overrides=overrides)
        if baseline["answer"] != expected:
            print(f"{mode}: expected {expected!r}, got {baseline['answer']!r}")
            return 1
        for attempt in range(20):
            shuffled = list(lines)
            rng.shuffle(shuffled)
            report = run_plan(shuffled, mode=mode, env_overrides=overrides)
            if report["report_id"] != baseline["report_id"]:
                print(f"{mode}: shuffle #{attempt} changed the report ({report['report_id']})")
                return 1

    print("Determinism smoke-test passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
