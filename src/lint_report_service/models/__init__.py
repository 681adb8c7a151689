"""Data models for canonical lint issues, scan summaries, and diffs."""

from .diff import DiffReport, SummaryDelta
from .issue import Category, Issue, Location, Severity, fingerprint
from .snapshot import NormalizationResult, ScanSnapshot
from .summary import CategoryCounts, Summary, calculate_score

__all__ = [
    "Category",
    "CategoryCounts",
    "DiffReport",
    "Issue",
    "Location",
    "NormalizationResult",
    "ScanSnapshot",
    "Severity",
    "Summary",
    "SummaryDelta",
    "calculate_score",
    "fingerprint",
]
