"""Canonical issue models shared by the normalizer, diff engine, and report."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class Severity(str, Enum):
    """Severity levels, declared in sort order (most severe first)."""

    ERROR = "Error"
    WARNING = "Warning"
    INFORMATION = "Information"
    HINT = "Hint"

    @property
    def ordinal(self) -> int:
        return _SEVERITY_ORDINALS[self]

    @property
    def label(self) -> str:
        return self.value.upper()

    @classmethod
    def from_label(cls, value: object) -> "Severity":
        """Parse a stored severity label such as ``"Error"`` or ``"warning"``."""

        if isinstance(value, Severity):
            return value
        if isinstance(value, str):
            folded = value.strip().lower()
            for severity in cls:
                if severity.value.lower() == folded:
                    return severity
        raise ValueError(f"Unknown severity label: {value!r}")


_SEVERITY_ORDINALS = {
    Severity.ERROR: 0,
    Severity.WARNING: 1,
    Severity.INFORMATION: 2,
    Severity.HINT: 3,
}


class Category(str, Enum):
    """Issue categories in classification priority order."""

    SPEC_COMPLIANCE = "Spec Compliance"
    DOCUMENTATION = "Documentation"
    STRUCTURE = "Structure"
    SECURITY = "Security"
    NAMING_CONVENTIONS = "Naming Conventions"
    RESPONSE_DESIGN = "Response Design"
    SERVER_CONFIGURATION = "Server Configuration"
    BEST_PRACTICE = "Best Practice"
    GENERAL = "General"


@dataclass(slots=True, frozen=True)
class Location:
    """Pointer into the linted document, optionally with a 1-based position."""

    path: str = ""
    line: int | None = None
    column: int | None = None

    def describe(self) -> str:
        if self.line is None:
            return self.path
        position = f"line {self.line}"
        if self.column is not None:
            position += f", col {self.column}"
        return f"{self.path} ({position})" if self.path else position


@dataclass(slots=True, frozen=True)
class Issue:
    """A single normalized lint violation."""

    code: str
    message: str
    severity: Severity
    category: Category
    location: Location = Location()

    @property
    def path(self) -> str:
        return self.location.path

    def to_dict(self) -> dict[str, Any]:
        location_range: dict[str, int] | None = None
        if self.location.line is not None:
            location_range = {"startLine": self.location.line}
            if self.location.column is not None:
                location_range["startCol"] = self.location.column

        return {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "severityLevel": self.severity.ordinal,
            "path": self.location.path,
            "range": location_range,
            "category": self.category.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Issue":
        """Rebuild an issue from its stored form.

        Raises ``ValueError`` or ``TypeError`` when the structure is not an
        issue record; callers decide how to surface that.
        """

        if not isinstance(data, Mapping):
            raise TypeError(f"Issue record must be a mapping, got {type(data).__name__}")

        code = data.get("code")
        if not isinstance(code, str):
            raise ValueError("Issue record is missing a string 'code'")

        line: int | None = None
        column: int | None = None
        location_range = data.get("range")
        if isinstance(location_range, Mapping):
            line = _optional_int(location_range.get("startLine"))
            column = _optional_int(location_range.get("startCol"))

        try:
            category = Category(data.get("category"))
        except ValueError:
            category = Category.GENERAL

        # matching only needs code and path; older baselines may omit severity
        try:
            severity = Severity.from_label(data.get("severity"))
        except ValueError:
            severity = Severity.WARNING

        return cls(
            code=code,
            message=str(data.get("message") or ""),
            severity=severity,
            category=category,
            location=Location(path=str(data.get("path") or ""), line=line, column=column),
        )


def fingerprint(issue: Issue) -> str:
    """Identity used to match issues across scans: rule code plus path."""

    return f"{issue.code}::{issue.location.path}"


def _optional_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value
