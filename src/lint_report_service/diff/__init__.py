"""Incremental comparison between consecutive scans."""

from .engine import (
    DUPLICATE_FINGERPRINT_POLICY,
    DiffEngine,
    DiffError,
    DuplicatePolicy,
    index_by_fingerprint,
)

__all__ = [
    "DUPLICATE_FINGERPRINT_POLICY",
    "DiffEngine",
    "DiffError",
    "DuplicatePolicy",
    "index_by_fingerprint",
]
