"""Conversion helpers that turn raw upstream lint violations into canonical issues."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Sequence

from ..models import Issue, Location, NormalizationResult, Severity, Summary
from .categories import CATEGORY_RULES, CategoryRule, categorize

logger = logging.getLogger(__name__)

DEFAULT_RULE_CODE = "unknown-rule"
DEFAULT_SEVERITY = Severity.WARNING


class NormalizationError(RuntimeError):
    """Raised when the upstream payload is not a list of violations."""


class IssueNormalizer:
    """Normalize loosely typed upstream violations into :class:`Issue` records."""

    _SEVERITY_ALIASES = {
        "error": Severity.ERROR,
        "0": Severity.ERROR,
        "warn": Severity.WARNING,
        "warning": Severity.WARNING,
        "1": Severity.WARNING,
        "info": Severity.INFORMATION,
        "information": Severity.INFORMATION,
        "2": Severity.INFORMATION,
        "hint": Severity.HINT,
        "3": Severity.HINT,
    }

    def __init__(self, category_rules: Sequence[CategoryRule] = CATEGORY_RULES) -> None:
        self._category_rules = tuple(category_rules)

    def normalize(self, raw_violations: Sequence[Any]) -> NormalizationResult:
        """Return severity-sorted issues and their summary."""

        if isinstance(raw_violations, (str, bytes, Mapping)) or not isinstance(
            raw_violations, Sequence
        ):
            raise NormalizationError(
                f"Expected a list of violations, got {type(raw_violations).__name__}"
            )

        issues = [self._normalize_record(record) for record in raw_violations]
        # sorted() is stable, so equal severities keep their input order
        issues = sorted(issues, key=lambda issue: issue.severity.ordinal)
        summary = Summary.from_issues(issues)

        logger.debug(
            "normalization.complete records=%d score=%d passed=%s",
            len(issues),
            summary.score,
            summary.passed,
        )
        return NormalizationResult(issues=tuple(issues), summary=summary)

    def normalize_payload(self, payload: Any) -> NormalizationResult:
        """Normalize a full upstream response body."""

        return self.normalize(extract_violations(payload))

    # ------------------------------------------------------------------
    def _normalize_record(self, record: Any) -> Issue:
        if not isinstance(record, Mapping):
            return Issue(
                code=DEFAULT_RULE_CODE,
                message=str(record),
                severity=DEFAULT_SEVERITY,
                category=categorize(DEFAULT_RULE_CODE, self._category_rules),
            )

        code = _first_text(record, "ruleName", "rule", "code", "ruleId") or DEFAULT_RULE_CODE
        message = _first_text(record, "message", "description") or code

        return Issue(
            code=code,
            message=message,
            severity=self.normalize_severity(record.get("severity")),
            category=categorize(code, self._category_rules),
            location=self._normalize_location(record),
        )

    # ------------------------------------------------------------------
    def normalize_severity(self, level: object) -> Severity:
        if isinstance(level, Severity):
            return level

        if isinstance(level, bool):
            return DEFAULT_SEVERITY

        if isinstance(level, int):
            level = str(level)

        if isinstance(level, str):
            normalized = level.strip().lower()
            if normalized in self._SEVERITY_ALIASES:
                return self._SEVERITY_ALIASES[normalized]

        return DEFAULT_SEVERITY

    # ------------------------------------------------------------------
    def _normalize_location(self, record: Mapping[str, Any]) -> Location:
        raw_path = record.get("pointer")
        if raw_path is None:
            raw_path = record.get("path")
        path = _join_path(raw_path)

        line = _positive_int(record.get("line"))
        column = _positive_int(_first_value(record, "column", "col", "character"))

        if line is None:
            line, column = _range_start(record.get("range"))

        return Location(path=path, line=line, column=column if line is not None else None)


def extract_violations(payload: Any) -> List[Any]:
    """Pull the violation array out of an upstream standardization response."""

    if isinstance(payload, list):
        return payload

    if isinstance(payload, Mapping):
        errors = payload.get("errors")
        if errors is None and isinstance(payload.get("result"), Mapping):
            errors = payload["result"].get("errors")
        if isinstance(errors, list):
            return errors

    raise NormalizationError("Upstream payload does not contain a violation list")


def _first_value(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _first_text(record: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = record.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return ""


def _join_path(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ".".join(str(segment) for segment in value)
    return str(value)


def _positive_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped.isdigit():
            return None
        value = int(stripped)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and value > 0:
        return value
    return None


def _range_start(value: Any) -> tuple[int | None, int | None]:
    """Convert a zero-based Spectral ``range.start`` into 1-based line/column."""

    if not isinstance(value, Mapping):
        return None, None
    start = value.get("start")
    if not isinstance(start, Mapping):
        return None, None

    line = start.get("line")
    character = start.get("character")
    if isinstance(line, bool) or not isinstance(line, int) or line < 0:
        return None, None
    column: int | None = None
    if isinstance(character, int) and not isinstance(character, bool) and character >= 0:
        column = character + 1
    return line + 1, column
