"""Rules file -> schedule -> validated report pipeline."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from contracts import validator
from contracts.errors import InputFileError
from contracts.jsoncanon import canonical_digest, digest_without

from . import log
from .graph import DependencyGraph
from .scheduler import ScheduleResult, Scheduler
from .settings import PlannerSettings, resolve_settings

_LOGGER = logging.getLogger(__name__)

REPORT_TYPE = "ScheduleReport"
SCHEMA_VERSION = "1.0"


def _merge_env(overrides: Mapping[str, str] | None = None) -> Dict[str, str]:
    env: Dict[str, str] = {str(k): str(v) for k, v in os.environ.items()}
    if overrides:
        env.update({str(k): str(v) for k, v in overrides.items()})
    return env


def load_rules(path: str | Path) -> List[str]:
    """Read the rule lines of ``path`` without trailing newlines."""

    rules_path = Path(path)
    if not rules_path.is_file():
        raise InputFileError(str(path))
    return rules_path.read_text(encoding="utf-8").splitlines()


def rules_digest(graph: DependencyGraph) -> str:
    """Digest of the step set and edge set; independent of rule order."""

    return canonical_digest({"steps": list(graph.pending()), "edges": graph.edges()})


def build_report(
    result: ScheduleResult,
    graph: DependencyGraph,
    settings: PlannerSettings,
) -> Dict[str, Any]:
    answer: int | str = result.order if settings.mode == "order" else result.elapsed
    report: Dict[str, Any] = {
        "type": REPORT_TYPE,
        "schema_version": SCHEMA_VERSION,
        "mode": settings.mode,
        "settings": settings.to_payload(),
        "answer": answer,
        "elapsed": result.elapsed,
        "order": result.order,
        "task_count": len(graph),
        "edge_count": graph.edge_count,
        "rules_digest": rules_digest(graph),
        "assignments": [
            item.to_payload()
            for item in sorted(result.assignments, key=lambda a: (a.start, a.worker_id))
        ],
    }
    report["report_id"] = digest_without(report, "report_id")
    return report


def run_plan(
    source: str | Path | Sequence[str],
    *,
    mode: str = "duration",
    env_overrides: Mapping[str, str] | None = None,
    validate: bool = True,
) -> Dict[str, Any]:
    """Schedule the rules in ``source`` and return a ``ScheduleReport``.

    ``source`` is either a path to a rules file or the rule lines themselves.
    Settings come from :func:`planner.settings.resolve_settings` with
    ``env_overrides`` layered over the process environment.
    """

    lines = load_rules(source) if isinstance(source, (str, Path)) else list(source)
    env = _merge_env(env_overrides)
    settings = resolve_settings(mode, env)
    _LOGGER.debug("resolved %s settings from %s: %s", mode, settings.decision_source, settings.to_payload())

    graph = DependencyGraph.from_rules(lines, seed_alphabet=settings.seed_alphabet)
    scheduler = Scheduler(graph, worker_count=settings.worker_count, base_offset=settings.base_offset)
    result = scheduler.run()

    report = build_report(result, graph, settings)
    if validate:
        outcome = validator.assert_valid(report)
        for issue in outcome.warnings:
            _LOGGER.warning("%s: %s", issue.code, issue.msg)

    log.emit(
        "schedule.completed",
        mode=settings.mode,
        answer=report["answer"],
        elapsed=result.elapsed,
        worker_count=settings.worker_count,
        base_offset=settings.base_offset,
        task_count=report["task_count"],
        rules_digest=report["rules_digest"],
        report_id=report["report_id"],
        decision_source=settings.decision_source,
    )
    return report


__all__ = ["build_report", "load_rules", "rules_digest", "run_plan"]
