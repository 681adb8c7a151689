"""Destinations for generated report documents."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol, runtime_checkable

from .snapshot_store import key_segment

logger = logging.getLogger(__name__)

REPORT_PREFIX = "reports"


class SinkIOError(RuntimeError):
    """Raised when a report document cannot be stored."""


@runtime_checkable
class DocumentSink(Protocol):
    def store(self, key: str, data: bytes) -> str: ...


def report_key(owner: str, subject: str, version: str, epoch_ms: int) -> str:
    try:
        segments = [key_segment(value) for value in (owner, subject, version)]
    except ValueError as exc:
        raise SinkIOError(str(exc)) from exc
    return f"{REPORT_PREFIX}/{'/'.join(segments)}/validation-report-{epoch_ms}.pdf"


class LocalDocumentSink:
    """Write documents under ``root`` and hand back a ``file://`` URI."""

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def store(self, key: str, data: bytes) -> str:
        parts = Path(key).parts
        if not parts or Path(key).is_absolute() or ".." in parts:
            raise SinkIOError(f"Invalid document key: {key!r}")

        destination = self._root.joinpath(*parts)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(data)
        except OSError as exc:
            raise SinkIOError(f"Failed to store document {key}: {exc}") from exc

        logger.debug("report.stored path=%s bytes=%d", destination, len(data))
        return destination.resolve().as_uri()
