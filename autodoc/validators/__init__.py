"""Validation package for analysis aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence

from .base import Severity, ValidationIssue, ValidationReport, Validator
from .consistency import ConsistencyValidator

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from autodoc.aggregate import ResultAggregate


def run_validators(
    aggregate: "ResultAggregate",
    validators: Sequence[Validator] | None = None,
) -> ValidationReport:
    """Run each validator in order and collect their issues into one report."""
    active = list(validators) if validators is not None else [ConsistencyValidator()]
    issues: List[ValidationIssue] = []
    for validator in active:
        issues.extend(validator.validate(aggregate))
    return ValidationReport.from_issues(issues)


__all__ = [
    "ConsistencyValidator",
    "Severity",
    "ValidationIssue",
    "ValidationReport",
    "Validator",
    "run_validators",
]
