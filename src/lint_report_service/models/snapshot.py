"""Scan results and the persisted baseline used for incremental diffs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

from .issue import Issue
from .summary import Summary


@dataclass(slots=True, frozen=True)
class NormalizationResult:
    """Canonical issues (severity-sorted) and their summary."""

    issues: tuple[Issue, ...]
    summary: Summary

    def to_dict(self) -> dict[str, Any]:
        return {
            "issues": [issue.to_dict() for issue in self.issues],
            "summary": self.summary.to_dict(),
        }


@dataclass(slots=True, frozen=True)
class ScanSnapshot:
    """Latest scan for one (owner, subject) pair."""

    owner: str
    subject: str
    version: str
    scanned_at: str
    summary: Mapping[str, Any] = field(default_factory=dict)
    issues: tuple[Issue, ...] = ()

    @classmethod
    def from_result(
        cls,
        owner: str,
        subject: str,
        version: str,
        result: NormalizationResult,
        *,
        scanned_at: datetime | None = None,
    ) -> "ScanSnapshot":
        timestamp = scanned_at or datetime.now(timezone.utc)
        return cls(
            owner=owner,
            subject=subject,
            version=version,
            scanned_at=timestamp.isoformat(),
            summary=result.summary.to_dict(),
            issues=tuple(result.issues),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner": self.owner,
            "apiName": self.subject,
            "version": self.version,
            "scannedAt": self.scanned_at,
            "summary": dict(self.summary),
            "issues": [issue.to_dict() for issue in self.issues],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScanSnapshot":
        """Parse a stored snapshot; raises ``ValueError``/``TypeError`` when malformed."""

        if not isinstance(data, Mapping):
            raise TypeError(f"Snapshot must be a mapping, got {type(data).__name__}")

        summary = data.get("summary") or {}
        if not isinstance(summary, Mapping):
            raise TypeError("Snapshot 'summary' must be a mapping")

        raw_issues = data.get("issues") or []
        if not isinstance(raw_issues, list):
            raise TypeError("Snapshot 'issues' must be a list")

        return cls(
            owner=str(data.get("owner") or ""),
            subject=str(data.get("apiName") or data.get("subject") or ""),
            version=str(data.get("version") or "unknown"),
            scanned_at=str(data.get("scannedAt") or ""),
            summary=dict(summary),
            issues=tuple(Issue.from_dict(item) for item in raw_issues),
        )
