"""Diff report models produced by comparing two scans."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .issue import Issue


@dataclass(slots=True, frozen=True)
class SummaryDelta:
    """Per-field change in summary counts (current minus previous)."""

    total_issues: int = 0
    errors: int = 0
    warnings: int = 0
    info: int = 0
    hints: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "totalIssues": self.total_issues,
            "errors": self.errors,
            "warnings": self.warnings,
            "info": self.info,
            "hints": self.hints,
        }


@dataclass(slots=True, frozen=True)
class DiffReport:
    """Classification of issues across two scans plus score movement."""

    is_first_scan: bool
    current_score: int
    previous_score: int | None = None
    score_change: int = 0
    previous_version: str | None = None
    previous_scanned_at: str | None = None
    new_issues: tuple[Issue, ...] = ()
    resolved_issues: tuple[Issue, ...] = ()
    persisting_issues: tuple[Issue, ...] = ()
    summary_delta: SummaryDelta = SummaryDelta()

    @property
    def has_baseline(self) -> bool:
        return not self.is_first_scan

    def to_dict(self) -> dict[str, Any]:
        return {
            "isFirstScan": self.is_first_scan,
            "previousVersion": self.previous_version,
            "previousScannedAt": self.previous_scanned_at,
            "scoreChange": self.score_change,
            "previousScore": self.previous_score,
            "currentScore": self.current_score,
            "newIssues": [issue.to_dict() for issue in self.new_issues],
            "resolvedIssues": [issue.to_dict() for issue in self.resolved_issues],
            "persistingIssues": [issue.to_dict() for issue in self.persisting_issues],
            "summaryDelta": self.summary_delta.to_dict(),
        }
