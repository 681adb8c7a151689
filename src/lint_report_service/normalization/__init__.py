"""Normalization of upstream lint violations into canonical issues."""

from .categories import CATEGORY_RULES, CategoryRule, categorize
from .issue_normalizer import IssueNormalizer, NormalizationError, extract_violations

__all__ = [
    "CATEGORY_RULES",
    "CategoryRule",
    "IssueNormalizer",
    "NormalizationError",
    "categorize",
    "extract_violations",
]
