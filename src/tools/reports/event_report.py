"""Aggregation helpers for schedule event logs."""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Iterable, Mapping

from contracts.jsoncanon import canonical_dump

__all__ = ["aggregate"]


def _load_events(paths: Iterable[Path]) -> Iterable[Mapping[str, object]]:
    for path in paths:
        for line in path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            yield json.loads(line)


def aggregate(paths: Iterable[Path]) -> Mapping[str, object]:
    """Summarise ``schedule.completed`` events per mode.

    Runs over the same rules share a ``rules_digest``; if any of them ended
    with different report ids the digest is listed under ``unstable``.
    """

    modes: Counter[str] = Counter()
    sources: Counter[str] = Counter()
    reports_by_rules: dict[tuple, set[str]] = {}
    longest = 0
    runs = 0
    for event in _load_events(paths):
        if event.get("event") != "schedule.completed":
            continue
        runs += 1
        modes[str(event.get("mode", "unknown"))] += 1
        sources[str(event.get("decision_source", "unknown"))] += 1
        elapsed = event.get("elapsed")
        if isinstance(elapsed, int):
            longest = max(longest, elapsed)
        key = (str(event.get("mode")), str(event.get("rules_digest")), event.get("worker_count"), event.get("base_offset"))
        reports_by_rules.setdefault(key, set()).add(str(event.get("report_id")))

    unstable = sorted({key[1] for key, report_ids in reports_by_rules.items() if len(report_ids) > 1})
    summary = {
        "total_runs": runs,
        "modes": dict(modes),
        "decision_sources": dict(sources),
        "max_elapsed": longest,
        "unstable": unstable,
    }
    summary["canonical"] = canonical_dump(summary).decode("utf-8")
    return summary
