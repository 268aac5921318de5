"""Invariant rules checked on every schedule report after schema validation."""

from __future__ import annotations


from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List

from .errors import ValidationIssue, make_error, make_warning
from .jsoncanon import digest_without


@dataclass(frozen=True)
class InvariantRule:
    name: str
    check: Callable[[dict], Iterable[ValidationIssue]]


def _step_cost(task: str, base_offset: int) -> int:
    return ord(task) - ord("A") + 1 + base_offset


def _answer_matches_mode(report: dict) -> Iterable[ValidationIssue]:
    mode = report["mode"]
    answer = report["answer"]
    if mode == "order" and answer != report["order"]:
        return [make_error("invariant.answer.mode", "order mode must answer with the completion order", "$.answer")]
    if mode == "duration" and answer != report["elapsed"]:
        return [make_error("invariant.answer.mode", "duration mode must answer with the elapsed time", "$.answer")]
    return []


def _conservation(report: dict) -> Iterable[ValidationIssue]:
    issues: List[ValidationIssue] = []
    tasks = [item["task"] for item in report["assignments"]]
    repeated = sorted(task for task, count in Counter(tasks).items() if count > 1)
    if repeated:
        issues.append(
            make_error("invariant.steps.duplicated", f"steps scheduled twice: {''.join(repeated)}", "$.assignments")
        )
    if sorted(tasks) != sorted(report["order"]):
        issues.append(
            make_error("invariant.steps.order_mismatch", "completion order and assignments disagree", "$.order")
        )
    if len(set(tasks)) != report["task_count"]:
        issues.append(
            make_error(
                "invariant.steps.count",
                f"{len(set(tasks))} steps scheduled, {report['task_count']} declared",
                "$.task_count",
            )
        )
    return issues


def _timing(report: dict) -> Iterable[ValidationIssue]:
    issues: List[ValidationIssue] = []
    base_offset = report["settings"]["base_offset"]
    elapsed = report["elapsed"]
    for index, item in enumerate(report["assignments"]):
        path = f"$.assignments[{index}]"
        if item["finish"] > elapsed:
            issues.append(make_error("invariant.timing.after_end", "step finishes after the schedule ends", path))
        if item["finish"] - item["start"] != _step_cost(item["task"], base_offset):
            issues.append(make_error("invariant.timing.duration", f"step {item['task']} has the wrong duration", path))
    finishes = [item["finish"] for item in report["assignments"]]
    if finishes and max(finishes) != elapsed:
        issues.append(make_error("invariant.timing.elapsed", "elapsed does not match the last finish", "$.elapsed"))
    return issues


def _workers(report: dict) -> Iterable[ValidationIssue]:
    issues: List[ValidationIssue] = []
    worker_count = report["settings"]["worker_count"]
    lanes: Dict[int, List[dict]] = defaultdict(list)
    for index, item in enumerate(report["assignments"]):
        if item["worker"] >= worker_count:
            issues.append(
                make_error("invariant.workers.range", f"worker {item['worker']} outside the pool", f"$.assignments[{index}]")
            )
        lanes[item["worker"]].append(item)
    for worker, items in sorted(lanes.items()):
        items.sort(key=lambda item: (item["start"], item["finish"]))
        for before, after in zip(items, items[1:]):
            if after["start"] < before["finish"]:
                issues.append(
                    make_error(
                        "invariant.workers.overlap",
                        f"worker {worker} runs {before['task']} and {after['task']} at once",
                        "$.assignments",
                    )
                )
    return issues


def _completion_order(report: dict) -> Iterable[ValidationIssue]:
    ranked = sorted(report["assignments"], key=lambda item: (item["finish"], item["task"]))
    if "".join(item["task"] for item in ranked) != report["order"]:
        return [make_error("invariant.order.sequence", "order is not sorted by finish time then step", "$.order")]
    return []


def _report_id(report: dict) -> Iterable[ValidationIssue]:
    if digest_without(report, "report_id") != report["report_id"]:
        return [make_error("invariant.report_id", "report_id does not match canonical digest", "$.report_id")]
    return []


def _idle_pool(report: dict) -> Iterable[ValidationIssue]:
    workers_used = {item["worker"] for item in report["assignments"]}
    if report["assignments"] and len(workers_used) < report["settings"]["worker_count"]:
        return [
            make_warning(
                "invariant.workers.unused",
                f"only {len(workers_used)} of {report['settings']['worker_count']} workers were used",
                "$.settings.worker_count",
            )
        ]
    return []


_INVARIANTS = (
    InvariantRule("answer_matches_mode", _answer_matches_mode),
    InvariantRule("conservation", _conservation),
    InvariantRule("timing", _timing),
    InvariantRule("workers", _workers),
    InvariantRule("completion_order", _completion_order),
    InvariantRule("report_id", _report_id),
    InvariantRule("idle_pool", _idle_pool),
)


def run_invariants(report: dict) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    for rule in _INVARIANTS:
        issues.extend(rule.check(report))
    return issues


__all__ = ["InvariantRule", "run_invariants"]
