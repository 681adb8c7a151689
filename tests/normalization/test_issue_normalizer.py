from __future__ import annotations

from typing import Any

import pytest

from lint_report_service.models import Category, Location, Severity
from lint_report_service.normalization import (
    IssueNormalizer,
    NormalizationError,
    extract_violations,
)


def test_normalize_spec_example_sorts_and_scores() -> None:
    raw = [
        {"ruleName": "info-contact", "severity": "WARN", "message": "m1", "pointer": "info"},
        {"ruleName": "oas3-schema", "severity": "ERROR", "message": "m2", "pointer": "paths./x"},
    ]

    result = IssueNormalizer().normalize(raw)

    assert [issue.code for issue in result.issues] == ["oas3-schema", "info-contact"]
    first, second = result.issues
    assert first.severity is Severity.ERROR
    assert first.category is Category.SPEC_COMPLIANCE
    assert second.category is Category.DOCUMENTATION

    summary = result.summary
    assert summary.errors == 1
    assert summary.warnings == 1
    assert summary.score == 87
    assert summary.passed is False
    assert summary.categories["Spec Compliance"].count == 1
    assert summary.categories["Spec Compliance"].errors == 1
    assert summary.categories["Documentation"].warnings == 1


def test_normalize_empty_list_yields_perfect_score() -> None:
    result = IssueNormalizer().normalize([])

    assert result.issues == ()
    assert result.summary.total_issues == 0
    assert result.summary.score == 100
    assert result.summary.passed is True
    assert dict(result.summary.categories) == {}


def test_score_is_clamped_at_zero() -> None:
    raw = [{"ruleName": f"rule-{index}", "severity": "ERROR"} for index in range(11)]

    result = IssueNormalizer().normalize(raw)

    assert result.summary.errors == 11
    assert result.summary.score == 0


@pytest.mark.parametrize("severity", ["ERROR", "WARN", "INFO", "HINT"])
@pytest.mark.parametrize("base_size", [0, 3, 12])
def test_adding_an_issue_never_raises_the_score(severity: str, base_size: int) -> None:
    base = [
        {"ruleName": f"rule-{index}", "severity": ("ERROR", "WARN", "INFO")[index % 3]}
        for index in range(base_size)
    ]
    normalizer = IssueNormalizer()

    before = normalizer.normalize(base).summary.score
    after = normalizer.normalize([*base, {"ruleName": "extra", "severity": severity}]).summary.score

    assert 0 <= after <= before


def test_missing_fields_are_defaulted() -> None:
    result = IssueNormalizer().normalize([{}])

    (issue,) = result.issues
    assert issue.code == "unknown-rule"
    assert issue.message == "unknown-rule"
    assert issue.severity is Severity.WARNING
    assert issue.category is Category.GENERAL
    assert issue.location == Location()


def test_non_mapping_record_becomes_default_issue() -> None:
    result = IssueNormalizer().normalize(["something odd"])

    (issue,) = result.issues
    assert issue.code == "unknown-rule"
    assert issue.message == "something odd"
    assert issue.severity is Severity.WARNING


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("ERROR", Severity.ERROR),
        ("error", Severity.ERROR),
        (0, Severity.ERROR),
        ("0", Severity.ERROR),
        ("WARN", Severity.WARNING),
        ("warning", Severity.WARNING),
        (1, Severity.WARNING),
        ("INFO", Severity.INFORMATION),
        ("information", Severity.INFORMATION),
        (2, Severity.INFORMATION),
        ("HINT", Severity.HINT),
        (3, Severity.HINT),
        ("  Hint  ", Severity.HINT),
        ("critical", Severity.WARNING),
        (None, Severity.WARNING),
        (True, Severity.WARNING),
        (7, Severity.WARNING),
        (2.5, Severity.WARNING),
    ],
)
def test_normalize_severity(raw: Any, expected: Severity) -> None:
    assert IssueNormalizer().normalize_severity(raw) is expected


def test_equal_severities_keep_input_order() -> None:
    raw = [
        {"ruleName": "b-rule", "severity": "INFO"},
        {"ruleName": "a-rule", "severity": "WARN"},
        {"ruleName": "c-rule", "severity": "INFO"},
        {"ruleName": "d-rule", "severity": "WARN"},
    ]

    result = IssueNormalizer().normalize(raw)

    assert [issue.code for issue in result.issues] == ["a-rule", "d-rule", "b-rule", "c-rule"]


def test_alternate_field_names_are_accepted() -> None:
    raw = [
        {
            "code": "operation-tags",
            "description": "Operation must have tags.",
            "severity": 1,
            "path": ["paths", "/pets", "get"],
            "range": {"start": {"line": 9, "character": 4}},
        }
    ]

    (issue,) = IssueNormalizer().normalize(raw).issues

    assert issue.code == "operation-tags"
    assert issue.message == "Operation must have tags."
    assert issue.path == "paths./pets.get"
    assert issue.location.line == 10
    assert issue.location.column == 5
    assert issue.category is Category.STRUCTURE


@pytest.mark.parametrize("line", [0, -3, "abc", None, True])
def test_non_positive_or_invalid_line_is_dropped(line: Any) -> None:
    (issue,) = IssueNormalizer().normalize(
        [{"ruleName": "x", "line": line, "column": 4}]
    ).issues

    assert issue.location.line is None
    assert issue.location.column is None


def test_line_given_as_string_is_parsed() -> None:
    (issue,) = IssueNormalizer().normalize([{"ruleName": "x", "line": "12"}]).issues

    assert issue.location.line == 12


@pytest.mark.parametrize("payload", ["not a list", {"errors": "nope"}, 42, None])
def test_normalize_payload_rejects_non_list(payload: Any) -> None:
    with pytest.raises(NormalizationError):
        IssueNormalizer().normalize_payload(payload)


@pytest.mark.parametrize("raw", ["text", {"ruleName": "x"}, 5])
def test_normalize_rejects_non_sequence(raw: Any) -> None:
    with pytest.raises(NormalizationError):
        IssueNormalizer().normalize(raw)


def test_extract_violations_supports_wrapped_shapes() -> None:
    records = [{"ruleName": "a"}]

    assert extract_violations(records) is records
    assert extract_violations({"errors": records}) is records
    assert extract_violations({"result": {"errors": records}}) is records


def test_normalize_is_deterministic(petstore_payload: dict[str, Any]) -> None:
    normalizer = IssueNormalizer()

    first = normalizer.normalize_payload(petstore_payload)
    second = normalizer.normalize_payload(petstore_payload)

    assert first == second


def test_petstore_fixture_summary(petstore_payload: dict[str, Any]) -> None:
    result = IssueNormalizer().normalize_payload(petstore_payload)
    summary = result.summary

    assert summary.total_issues == 20
    assert (summary.errors, summary.warnings, summary.info, summary.hints) == (1, 12, 7, 0)
    assert summary.score == 47
    assert summary.passed is False
    assert summary.total_issues == summary.errors + summary.warnings + summary.info + summary.hints
    assert sum(counts.count for counts in summary.categories.values()) == summary.total_issues

    assert list(summary.categories) == [
        "Security",
        "Documentation",
        "Server Configuration",
        "Structure",
        "Best Practice",
        "Response Design",
        "Spec Compliance",
    ]
    assert summary.categories["Documentation"].count == 6
    assert summary.categories["Best Practice"].count == 6
    assert summary.categories["Best Practice"].warnings == 2
    assert summary.categories["Security"].errors == 1

    assert result.issues[0].code == "no-eval-in-markdown"
    ordinals = [issue.severity.ordinal for issue in result.issues]
    assert ordinals == sorted(ordinals)

    tags = [issue for issue in result.issues if issue.code == "bp-tags-description"]
    assert [issue.location.line for issue in tags] == [None, None]


def test_summary_to_dict_uses_wire_names(petstore_payload: dict[str, Any]) -> None:
    data = IssueNormalizer().normalize_payload(petstore_payload).summary.to_dict()

    assert data["totalIssues"] == 20
    assert data["passedValidation"] is False
    assert data["score"] == 47
    assert data["categories"]["Security"] == {"count": 1, "errors": 1, "warnings": 0}
