"""Core validation data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Protocol, Tuple

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from autodoc.aggregate import ResultAggregate


class Severity(IntEnum):
    """Issue severity, ordered from least to most serious."""

    INFO = 1
    WARNING = 2
    ERROR = 3
    CRITICAL = 4


@dataclass(frozen=True)
class ValidationIssue:
    """A single finding reported by a validator."""

    message: str
    severity: Severity
    source: str
    details: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "severity": self.severity.name,
            "source": self.source,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class ValidationReport:
    """Ordered, immutable collection of issues."""

    issues: Tuple[ValidationIssue, ...] = ()

    @classmethod
    def from_issues(cls, issues: Iterable[ValidationIssue]) -> "ValidationReport":
        return cls(issues=tuple(issues))

    @property
    def is_valid(self) -> bool:
        return not any(issue.severity >= Severity.ERROR for issue in self.issues)

    def issues_by_severity(self, severity: Severity) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == severity]

    @property
    def summary(self) -> str:
        if not self.issues:
            return "Validation passed with no issues"
        counts = ", ".join(
            f"{len(self.issues_by_severity(level))} {level.name.lower()}"
            for level in Severity
            if self.issues_by_severity(level)
        )
        status = "passed" if self.is_valid else "failed"
        return f"Validation {status}: {counts}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.is_valid,
            "summary": self.summary,
            "issues": [issue.to_dict() for issue in self.issues],
        }

    def __len__(self) -> int:
        return len(self.issues)


class Validator(Protocol):
    """Protocol implemented by aggregate validators."""

    name: str

    def validate(self, aggregate: "ResultAggregate") -> List[ValidationIssue]:
        """Run validation and return any issues."""


__all__ = ["Severity", "ValidationIssue", "ValidationReport", "Validator"]
