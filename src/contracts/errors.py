"""Shared error types for the step planner."""

from __future__ import annotations


from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

SEVERITY_ERROR = "ERROR"
SEVERITY_WARN = "WARN"


class PlannerError(RuntimeError):
    """Base class for every failure raised by the planner."""


class RuleParseError(PlannerError):
    """Raised when a precedence line does not match the rule sentence."""

    def __init__(self, line: str, line_no: int | None = None) -> None:
        self.line = line
        self.line_no = line_no
        where = f"line {line_no}: " if line_no is not None else ""
        super().__init__(f"{where}malformed step rule {line!r}")


class CyclicDependencyError(PlannerError):
    """Raised when no step can start although steps remain unfinished."""

    def __init__(self, blocked: Iterable[str]) -> None:
        self.blocked: Tuple[str, ...] = tuple(sorted(blocked))
        super().__init__(
            "dependency cycle detected; blocked steps: " + ", ".join(self.blocked)
        )


class ConfigurationError(PlannerError):
    """Raised when resolved settings are out of range or unparsable."""


class InputFileError(PlannerError):
    """Raised when the rules file cannot be read."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"File not found: {path}")


@dataclass(frozen=True)
class ValidationIssue:
    """Single finding produced by a schema or report rule check."""

    code: str
    msg: str
    path: str
    severity: str


@dataclass(frozen=True)
class ValidationReport:
    """Aggregate result of validating a schedule report."""

    ok: bool
    errors: List[ValidationIssue]
    warnings: List[ValidationIssue]
    timings_ms: Dict[str, int] = field(default_factory=dict)


class ReportValidationError(PlannerError):
    """Raised by :func:`contracts.validator.assert_valid` on failure."""

    def __init__(self, report: ValidationReport) -> None:
        self.report = report
        codes = ", ".join(issue.code for issue in report.errors)
        super().__init__(f"schedule report failed validation: {codes}")


def make_error(code: str, msg: str, path: str) -> ValidationIssue:
    """Construct an error-level :class:`ValidationIssue`."""

    return ValidationIssue(code=code, msg=msg, path=path, severity=SEVERITY_ERROR)


def make_warning(code: str, msg: str, path: str) -> ValidationIssue:
    """Construct a warning-level :class:`ValidationIssue`."""

    return ValidationIssue(code=code, msg=msg, path=path, severity=SEVERITY_WARN)


__all__ = [
    "SEVERITY_ERROR",
    "SEVERITY_WARN",
    "ConfigurationError",
    "CyclicDependencyError",
    "InputFileError",
    "PlannerError",
    "ReportValidationError",
    "RuleParseError",
    "ValidationIssue",
    "ValidationReport",
    "make_error",
    "make_warning",
]
