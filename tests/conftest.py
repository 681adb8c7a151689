from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from lint_report_service.models import Category, Issue, Location, Severity

FIXTURES = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def petstore_payload() -> dict[str, Any]:
    return json.loads((FIXTURES / "standardization-petstore.json").read_text(encoding="utf-8"))


@pytest.fixture
def petstore_path() -> Path:
    return FIXTURES / "standardization-petstore.json"


def make_issue(
    code: str,
    severity: Severity = Severity.WARNING,
    path: str = "",
    *,
    message: str | None = None,
    category: Category = Category.GENERAL,
    line: int | None = None,
) -> Issue:
    return Issue(
        code=code,
        message=message or f"{code} violated",
        severity=severity,
        category=category,
        location=Location(path=path, line=line),
    )


@pytest.fixture
def issue_factory():
    return make_issue
