from __future__ import annotations

from typing import Any

import pytest

from lint_report_service.diff import (
    DiffEngine,
    DiffError,
    DuplicatePolicy,
    index_by_fingerprint,
)
from lint_report_service.models import (
    NormalizationResult,
    ScanSnapshot,
    Severity,
    Summary,
    fingerprint,
)


def _result(*issues: Any) -> NormalizationResult:
    return NormalizationResult(issues=tuple(issues), summary=Summary.from_issues(issues))


def _snapshot(result: NormalizationResult, version: str = "1.0.0") -> dict[str, Any]:
    return ScanSnapshot.from_result("acme", "petstore", version, result).to_dict()


def test_first_scan_has_no_baseline(issue_factory) -> None:
    current = _result(issue_factory("a", Severity.ERROR, "p1"))

    diff = DiffEngine().compare(current, None)

    assert diff.is_first_scan is True
    assert diff.has_baseline is False
    assert diff.previous_score is None
    assert diff.score_change == 0
    assert diff.new_issues == ()
    assert diff.resolved_issues == ()
    assert diff.persisting_issues == ()
    assert diff.current_score == 90


def test_new_resolved_and_persisting_are_classified(issue_factory) -> None:
    a_p1 = issue_factory("A", Severity.ERROR, "p1")
    b_p2 = issue_factory("B", Severity.WARNING, "p2")
    c_p3 = issue_factory("C", Severity.WARNING, "p3")
    previous = _result(a_p1, b_p2)
    current = _result(b_p2, c_p3)

    diff = DiffEngine().compare(current, _snapshot(previous, version="0.9.0"))

    assert [issue.code for issue in diff.new_issues] == ["C"]
    assert [issue.code for issue in diff.resolved_issues] == ["A"]
    assert [issue.code for issue in diff.persisting_issues] == ["B"]
    assert diff.previous_score == 87
    assert diff.current_score == 94
    assert diff.score_change == 7
    assert diff.previous_version == "0.9.0"
    assert diff.summary_delta.errors == -1
    assert diff.summary_delta.warnings == 1
    assert diff.summary_delta.total_issues == 0


def test_identical_scans_only_persist(issue_factory) -> None:
    current = _result(issue_factory("A", Severity.ERROR, "p1"), issue_factory("B", Severity.HINT, "p2"))

    diff = DiffEngine().compare(current, _snapshot(current))

    assert diff.new_issues == ()
    assert diff.resolved_issues == ()
    assert len(diff.persisting_issues) == 2
    assert diff.score_change == 0
    assert diff.summary_delta.total_issues == 0


def test_partition_covers_both_scans(issue_factory) -> None:
    previous = _result(
        issue_factory("A", path="p1"),
        issue_factory("B", path="p2"),
        issue_factory("C", path="p3"),
    )
    current = _result(
        issue_factory("B", path="p2"),
        issue_factory("D", path="p4"),
    )

    diff = DiffEngine().compare(current, _snapshot(previous))

    current_keys = {fingerprint(issue) for issue in current.issues}
    previous_keys = {fingerprint(issue) for issue in previous.issues}
    new_keys = {fingerprint(issue) for issue in diff.new_issues}
    persisting_keys = {fingerprint(issue) for issue in diff.persisting_issues}
    resolved_keys = {fingerprint(issue) for issue in diff.resolved_issues}

    assert new_keys | persisting_keys == current_keys
    assert not new_keys & persisting_keys
    assert resolved_keys == previous_keys - current_keys


def test_message_change_does_not_alter_identity(issue_factory) -> None:
    previous = _result(issue_factory("A", path="p1", message="old wording"))
    current = _result(issue_factory("A", path="p1", message="new wording"))

    diff = DiffEngine().compare(current, _snapshot(previous))

    assert diff.new_issues == ()
    assert diff.persisting_issues[0].message == "new wording"


def test_missing_previous_score_yields_zero_change(issue_factory) -> None:
    current = _result(issue_factory("A", Severity.ERROR, "p1"))
    snapshot = {"version": "1.0", "summary": {"errors": 3}, "issues": []}

    diff = DiffEngine().compare(current, snapshot)

    assert diff.is_first_scan is False
    assert diff.has_baseline is True
    assert diff.previous_score is None
    assert diff.score_change == 0
    assert diff.summary_delta.errors == -2
    assert diff.summary_delta.warnings == 0


def test_missing_version_defaults_to_unknown() -> None:
    diff = DiffEngine().compare(_result(), {"summary": {"score": 100}, "issues": []})

    assert diff.previous_version == "unknown"


@pytest.mark.parametrize(
    "snapshot",
    [
        {"summary": {"score": 90}, "issues": "not-a-list"},
        {"summary": ["bad"], "issues": []},
        {"summary": {"score": "ninety"}, "issues": []},
        {"summary": {"score": 90, "errors": True}, "issues": []},
        {"summary": {"score": 90}, "issues": [{"message": "no code"}]},
        ["not", "a", "mapping"],
    ],
)
def test_malformed_snapshot_raises_diff_error(snapshot: Any) -> None:
    with pytest.raises(DiffError):
        DiffEngine().compare(_result(), snapshot)


def test_baseline_issues_without_severity_still_match(issue_factory) -> None:
    current = _result(issue_factory("a", path="x"), issue_factory("c", path="z"))
    snapshot = {
        "summary": {"score": 94},
        "issues": [{"code": "a", "path": "x"}, {"code": "b", "path": "y"}],
    }

    diff = DiffEngine().compare(current, snapshot)

    assert [fingerprint(issue) for issue in diff.resolved_issues] == ["b::y"]
    assert [fingerprint(issue) for issue in diff.new_issues] == ["c::z"]
    assert [fingerprint(issue) for issue in diff.persisting_issues] == ["a::x"]
    assert diff.resolved_issues[0].severity is Severity.WARNING


def test_unknown_baseline_severity_falls_back_to_warning() -> None:
    snapshot = {"summary": {"score": 90}, "issues": [{"code": "a", "severity": "Fatal"}]}

    diff = DiffEngine().compare(_result(), snapshot)

    (resolved,) = diff.resolved_issues
    assert resolved.severity is Severity.WARNING


def test_accepts_parsed_snapshot_instance(issue_factory) -> None:
    previous = _result(issue_factory("A", path="p1"))
    snapshot = ScanSnapshot.from_result("acme", "petstore", "2.0", previous)

    diff = DiffEngine().compare(_result(), snapshot)

    assert [issue.code for issue in diff.resolved_issues] == ["A"]
    assert diff.previous_version == "2.0"


def test_duplicate_fingerprints_collapse(issue_factory) -> None:
    first = issue_factory("A", path="p1", message="first")
    second = issue_factory("A", path="p1", message="second")

    assert index_by_fingerprint([first, second])["A::p1"].message == "second"
    assert (
        index_by_fingerprint([first, second], DuplicatePolicy.FIRST_WINS)["A::p1"].message
        == "first"
    )


def test_diff_report_serializes_wire_names(issue_factory) -> None:
    previous = _result(issue_factory("A", Severity.ERROR, "p1"))
    diff = DiffEngine().compare(_result(), _snapshot(previous))

    data = diff.to_dict()

    assert data["isFirstScan"] is False
    assert data["scoreChange"] == 10
    assert data["previousScore"] == 90
    assert data["resolvedIssues"][0]["code"] == "A"
    assert data["summaryDelta"]["errors"] == -1
