"""Errors, canonical JSON and schedule report validation."""

from __future__ import annotations

from .errors import (
    ConfigurationError,
    CyclicDependencyError,
    InputFileError,
    PlannerError,
    ReportValidationError,
    RuleParseError,
    ValidationIssue,
    ValidationReport,
)
from .validator import assert_valid, validate_report

__all__ = [
    "ConfigurationError",
    "CyclicDependencyError",
    "InputFileError",
    "PlannerError",
    "ReportValidationError",
    "RuleParseError",
    "ValidationIssue",
    "ValidationReport",
    "assert_valid",
    "validate_report",
]
