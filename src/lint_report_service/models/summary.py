"""Aggregated scan summary derived from a list of issues."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from .issue import Issue, Severity

MAX_SCORE = 100
MIN_SCORE = 0

SCORE_DEDUCTIONS = {
    Severity.ERROR: 10,
    Severity.WARNING: 3,
    Severity.INFORMATION: 1,
    Severity.HINT: 0,
}


@dataclass(slots=True, frozen=True)
class CategoryCounts:
    count: int = 0
    errors: int = 0
    warnings: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"count": self.count, "errors": self.errors, "warnings": self.warnings}


def calculate_score(issues: Iterable[Issue]) -> int:
    """Quality score in [0, 100]: start at 100 and deduct per severity."""

    score = MAX_SCORE
    for issue in issues:
        score -= SCORE_DEDUCTIONS[issue.severity]
    return max(MIN_SCORE, min(MAX_SCORE, score))


@dataclass(slots=True, frozen=True)
class Summary:
    """Counts, category breakdown, and score for one scan."""

    total_issues: int
    errors: int
    warnings: int
    info: int
    hints: int
    passed: bool
    score: int
    categories: Mapping[str, CategoryCounts] = field(default_factory=dict)

    @classmethod
    def from_issues(cls, issues: Iterable[Issue]) -> "Summary":
        issue_list = list(issues)
        severity_counts = {severity: 0 for severity in Severity}
        categories: dict[str, dict[str, int]] = {}

        for issue in issue_list:
            severity_counts[issue.severity] += 1
            counts = categories.setdefault(
                issue.category.value, {"count": 0, "errors": 0, "warnings": 0}
            )
            counts["count"] += 1
            if issue.severity is Severity.ERROR:
                counts["errors"] += 1
            elif issue.severity is Severity.WARNING:
                counts["warnings"] += 1

        errors = severity_counts[Severity.ERROR]
        return cls(
            total_issues=len(issue_list),
            errors=errors,
            warnings=severity_counts[Severity.WARNING],
            info=severity_counts[Severity.INFORMATION],
            hints=severity_counts[Severity.HINT],
            passed=errors == 0,
            score=calculate_score(issue_list),
            categories={name: CategoryCounts(**values) for name, values in categories.items()},
        )

    @property
    def max_category_count(self) -> int:
        return max((counts.count for counts in self.categories.values()), default=0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalIssues": self.total_issues,
            "errors": self.errors,
            "warnings": self.warnings,
            "info": self.info,
            "hints": self.hints,
            "passedValidation": self.passed,
            "categories": {name: counts.to_dict() for name, counts in self.categories.items()},
            "score": self.score,
        }
