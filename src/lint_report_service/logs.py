"""Logging setup: JSON lines for deployed runs, readable lines locally.

Context such as ``request_id`` or ``owner`` is attached with :func:`bind`,
which returns a :class:`ContextLogger`. Anything passed through ``extra`` is
emitted as a field next to the event name.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Mapping, MutableMapping, TextIO

PACKAGE_LOGGER = "lint_report_service"
SERVICE_NAME = "api-lint-report"

_RESERVED = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}

_installed_handler: logging.Handler | None = None


def record_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Non-standard attributes of ``record`` (bound context plus extras)."""

    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "event": record.getMessage(),
            "logger": record.name,
            "service": SERVICE_NAME,
        }
        entry.update(record_fields(record))
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ReadableFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = f"[{record.levelname}] {record.getMessage()}"
        fields = record_fields(record)
        if fields:
            line += f" {json.dumps(fields, default=str)}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that merges bound context into every record."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    @property
    def context(self) -> Mapping[str, Any]:
        return dict(self.extra or {})

    def bind(self, **context: Any) -> "ContextLogger":
        return ContextLogger(self.logger, {**(self.extra or {}), **context})


def bind(logger: logging.Logger | ContextLogger, **context: Any) -> ContextLogger:
    if isinstance(logger, ContextLogger):
        return logger.bind(**context)
    return ContextLogger(logger, context)


def configure_logging(
    level: str | int = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Install a single handler on the package logger, replacing a previous one."""

    global _installed_handler

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if _installed_handler is not None:
        package_logger.removeHandler(_installed_handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter() if json_output else ReadableFormatter())
    package_logger.addHandler(handler)
    package_logger.setLevel(level.upper() if isinstance(level, str) else level)
    _installed_handler = handler
    return handler
