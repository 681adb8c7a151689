"""Persistence of the most recent scan per API, used as the diff baseline."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping, Protocol, runtime_checkable
from urllib.parse import quote

from ..models import ScanSnapshot

logger = logging.getLogger(__name__)

HISTORY_PREFIX = "scan-history"
LATEST_FILENAME = "latest.json"


class SnapshotIOError(RuntimeError):
    """Raised when a snapshot cannot be read, decoded, or written."""


@runtime_checkable
class SnapshotStore(Protocol):
    """Latest-snapshot storage keyed by ``(owner, subject)``."""

    def get(self, owner: str, subject: str) -> Mapping[str, Any] | None: ...
    def put(self, owner: str, subject: str, snapshot: ScanSnapshot) -> None: ...


def snapshot_key(owner: str, subject: str) -> str:
    return f"{HISTORY_PREFIX}/{key_segment(owner)}/{key_segment(subject)}/{LATEST_FILENAME}"


def key_segment(value: str) -> str:
    """Encode ``value`` as a single path segment."""

    segment = quote(str(value), safe="-_.@")
    if segment in {"", ".", ".."}:
        raise ValueError(f"Invalid key segment: {value!r}")
    return segment


class LocalSnapshotStore:
    """Keep ``scan-history/{owner}/{subject}/latest.json`` under a root directory.

    Writes go through a temporary file followed by :func:`os.replace`, so a
    reader never observes a half-written snapshot. Concurrent writers are not
    coordinated; the last replace wins.
    """

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, owner: str, subject: str) -> Path:
        try:
            return self._root / snapshot_key(owner, subject)
        except ValueError as exc:
            raise SnapshotIOError(str(exc)) from exc

    def get(self, owner: str, subject: str) -> Mapping[str, Any] | None:
        path = self.path_for(owner, subject)
        if not path.exists():
            logger.debug("scan-history.miss path=%s", path)
            return None

        try:
            with path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise SnapshotIOError(f"Invalid JSON in snapshot: {path}") from exc
        except OSError as exc:
            raise SnapshotIOError(f"Failed to read snapshot {path}: {exc}") from exc

        if not isinstance(data, Mapping):
            raise SnapshotIOError(f"Snapshot is not a JSON object: {path}")
        return data

    def put(self, owner: str, subject: str, snapshot: ScanSnapshot) -> None:
        path = self.path_for(owner, subject)
        payload = json.dumps(snapshot.to_dict(), indent=2)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=".latest-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(temp_name, path)
            except BaseException:
                Path(temp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise SnapshotIOError(f"Failed to write snapshot {path}: {exc}") from exc

        logger.debug("scan-history.saved path=%s", path)
