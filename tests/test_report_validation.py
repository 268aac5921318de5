from __future__ import annotations

import copy
from pathlib import Path

import pytest

from contracts.errors import ReportValidationError
from contracts.jsoncanon import digest_without
from contracts.validator import assert_valid, validate_report
from planner.orchestrator import run_plan

DATA = Path(__file__).parent / "data" / "example_rules.txt"
DECLARED = {"CLI_PLANNER_SEED_ALPHABET": "0"}


def _report(mode: str = "duration") -> dict:
    return run_plan(DATA, mode=mode, env_overrides=DECLARED)


def _reseal(report: dict) -> dict:
    report["report_id"] = digest_without(report, "report_id")
    return report


def test_generated_reports_are_valid():
    for mode in ("order", "duration"):
        outcome = validate_report(_report(mode))
        assert outcome.ok, outcome.errors
        assert set(outcome.timings_ms) == {"schema", "invariants"}


def test_schema_violation_is_reported_with_path():
    report = _report()
    report["settings"]["worker_count"] = 0
    outcome = validate_report(report)
    assert not outcome.ok
    assert outcome.errors[0].code == "schema.violation"
    assert outcome.errors[0].path == "$.settings.worker_count"


def test_non_mapping_report_is_rejected():
    outcome = validate_report(["not", "a", "report"])  # type: ignore[arg-type]
    assert [issue.code for issue in outcome.errors] == ["type.mismatch"]


def test_tampered_report_id_is_detected():
    report = _report()
    report["report_id"] = "sha256-" + "0" * 64
    codes = {issue.code for issue in validate_report(report).errors}
    assert codes == {"invariant.report_id"}


def test_answer_must_match_mode():
    report = _report("order")
    report["answer"] = report["elapsed"]
    codes = {issue.code for issue in validate_report(_reseal(report)).errors}
    assert "invariant.answer.mode" in codes


def test_duplicate_step_breaks_conservation():
    report = _report()
    duplicate = copy.deepcopy(report["assignments"][0])
    report["assignments"].append(duplicate)
    codes = {issue.code for issue in validate_report(_reseal(report)).errors}
    assert "invariant.steps.duplicated" in codes
    assert "invariant.workers.overlap" in codes


def test_wrong_duration_is_detected():
    report = _report()
    report["assignments"][0]["finish"] += 1
    codes = {issue.code for issue in validate_report(_reseal(report)).errors}
    assert "invariant.timing.duration" in codes


def test_unused_workers_only_warn():
    outcome = validate_report(_report())
    assert outcome.ok
    assert [issue.code for issue in outcome.warnings] == ["invariant.workers.unused"]


def test_assert_valid_raises_on_errors():
    report = _report()
    report["order"] = report["order"][::-1]
    with pytest.raises(ReportValidationError) as excinfo:
        assert_valid(_reseal(report))
    assert not excinfo.value.report.ok
