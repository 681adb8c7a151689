"""Fingerprint-based comparison of the current scan against the stored baseline."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, Mapping

from ..models import (
    DiffReport,
    Issue,
    NormalizationResult,
    ScanSnapshot,
    SummaryDelta,
    fingerprint,
)

logger = logging.getLogger(__name__)


class DiffError(RuntimeError):
    """Raised when the previous snapshot is structurally invalid."""


class DuplicatePolicy(str, Enum):
    """Which issue is kept when a scan repeats a fingerprint."""

    LAST_WINS = "last-wins"
    FIRST_WINS = "first-wins"


# Two issues with the same code and path collapse into one map entry. With
# duplicates present this can under-count new and resolved issues.
DUPLICATE_FINGERPRINT_POLICY = DuplicatePolicy.LAST_WINS

_DELTA_FIELDS = {
    "total_issues": "totalIssues",
    "errors": "errors",
    "warnings": "warnings",
    "info": "info",
    "hints": "hints",
}


def index_by_fingerprint(
    issues: Iterable[Issue],
    policy: DuplicatePolicy = DUPLICATE_FINGERPRINT_POLICY,
) -> dict[str, Issue]:
    """Map fingerprints to issues, resolving duplicates with ``policy``."""

    index: dict[str, Issue] = {}
    for issue in issues:
        key = fingerprint(issue)
        if policy is DuplicatePolicy.FIRST_WINS and key in index:
            continue
        index[key] = issue
    return index


class DiffEngine:
    """Classify issues as new, resolved, or persisting between two scans."""

    def __init__(self, policy: DuplicatePolicy = DUPLICATE_FINGERPRINT_POLICY) -> None:
        self.policy = policy

    def compare(
        self,
        current: NormalizationResult,
        previous: ScanSnapshot | Mapping[str, Any] | None,
    ) -> DiffReport:
        """Return the diff of ``current`` against ``previous`` (``None`` on first scan)."""

        current_score = current.summary.score
        if previous is None:
            return DiffReport(is_first_scan=True, current_score=current_score)

        snapshot = self._coerce_snapshot(previous)

        previous_index = index_by_fingerprint(snapshot.issues, self.policy)
        current_index = index_by_fingerprint(current.issues, self.policy)

        new_issues = tuple(
            issue for issue in current.issues if fingerprint(issue) not in previous_index
        )
        resolved_issues = tuple(
            issue for issue in snapshot.issues if fingerprint(issue) not in current_index
        )
        persisting_issues = tuple(
            issue for issue in current.issues if fingerprint(issue) in previous_index
        )

        previous_score = self._previous_score(snapshot.summary)
        score_change = current_score - previous_score if previous_score is not None else 0

        report = DiffReport(
            is_first_scan=False,
            current_score=current_score,
            previous_score=previous_score,
            score_change=score_change,
            previous_version=snapshot.version or "unknown",
            previous_scanned_at=snapshot.scanned_at or None,
            new_issues=new_issues,
            resolved_issues=resolved_issues,
            persisting_issues=persisting_issues,
            summary_delta=self._summary_delta(current, snapshot.summary),
        )

        logger.debug(
            "diff.compare new=%d resolved=%d persisting=%d score_change=%d",
            len(new_issues),
            len(resolved_issues),
            len(persisting_issues),
            score_change,
        )
        return report

    # ------------------------------------------------------------------
    def _coerce_snapshot(self, previous: ScanSnapshot | Mapping[str, Any]) -> ScanSnapshot:
        if isinstance(previous, ScanSnapshot):
            return previous

        try:
            return ScanSnapshot.from_dict(previous)
        except (TypeError, ValueError) as exc:
            raise DiffError(f"Malformed previous snapshot: {exc}") from exc

    def _previous_score(self, summary: Mapping[str, Any]) -> int | None:
        score = summary.get("score")
        if score is None:
            return None
        return _count(score, "score")

    def _summary_delta(
        self,
        current: NormalizationResult,
        previous_summary: Mapping[str, Any],
    ) -> SummaryDelta:
        values: dict[str, int] = {}
        for attribute, key in _DELTA_FIELDS.items():
            previous_value = previous_summary.get(key)
            baseline = 0 if previous_value is None else _count(previous_value, key)
            values[attribute] = getattr(current.summary, attribute) - baseline
        return SummaryDelta(**values)


def _count(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DiffError(f"Snapshot summary field '{field_name}' must be numeric, got {value!r}")
    return int(value)
