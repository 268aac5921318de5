"""Public facade for schedule report validation."""

from __future__ import annotations

import json
import time
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

import jsonschema

from . import rulebook
from .errors import (
    SEVERITY_WARN,
    ReportValidationError,
    ValidationIssue,
    ValidationReport,
    make_error,
)

_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "schedule_report.schema.json"


@lru_cache(maxsize=1)
def _compiled_schema() -> jsonschema.Draft202012Validator:
    schema = json.loads(_SCHEMA_PATH.read_text("utf-8"))
    jsonschema.Draft202012Validator.check_schema(schema)
    return jsonschema.Draft202012Validator(schema)


def _jsonschema_path(error: jsonschema.ValidationError) -> str:
    components: List[str] = ["$"]
    for part in error.absolute_path:
        if isinstance(part, int):
            components.append(f"[{part}]")
        else:
            components.append(f".{part}")
    return "".join(components)


def _schema_stage(report: Any) -> List[ValidationIssue]:
    if not isinstance(report, dict):
        return [make_error("type.mismatch", "report must be a JSON object", "$")]
    validator = _compiled_schema()
    errors = sorted(validator.iter_errors(report), key=lambda err: list(err.absolute_path))
    return [make_error("schema.violation", err.message, _jsonschema_path(err)) for err in errors]


def validate_report(report: Dict[str, Any]) -> ValidationReport:
    """Check ``report`` against the JSON Schema, then against the invariants.

    Invariants only run once the schema passes since they rely on its shape.
    """

    timings = {"schema": 0, "invariants": 0}
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []

    schema_start = time.perf_counter()
    errors.extend(_schema_stage(report))
    timings["schema"] = int((time.perf_counter() - schema_start) * 1000)

    if not errors:
        invariants_start = time.perf_counter()
        for issue in rulebook.run_invariants(report):
            if issue.severity == SEVERITY_WARN:
                warnings.append(issue)
            else:
                errors.append(issue)
        timings["invariants"] = int((time.perf_counter() - invariants_start) * 1000)

    return ValidationReport(ok=not errors, errors=errors, warnings=warnings, timings_ms=timings)


def assert_valid(report: Dict[str, Any]) -> ValidationReport:
    result = validate_report(report)
    if not result.ok:
        raise ReportValidationError(result)
    return result


__all__ = ["assert_valid", "validate_report"]
