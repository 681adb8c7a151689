from __future__ import annotations

import pytest

from lint_report_service.models import Category
from lint_report_service.normalization import CATEGORY_RULES, CategoryRule, categorize


@pytest.mark.parametrize(
    "code, expected",
    [
        ("oas2-schema", Category.SPEC_COMPLIANCE),
        ("oas3-schema", Category.SPEC_COMPLIANCE),
        ("oas3-valid-schema-example", Category.SPEC_COMPLIANCE),
        ("oas3-valid-media-example", Category.SPEC_COMPLIANCE),
        ("info-contact", Category.DOCUMENTATION),
        ("info-description", Category.DOCUMENTATION),
        ("info-license", Category.DOCUMENTATION),
        ("license-url", Category.DOCUMENTATION),
        ("contact-properties", Category.DOCUMENTATION),
        ("operation-description", Category.DOCUMENTATION),
        ("operation-operationId", Category.STRUCTURE),
        ("operation-tags", Category.STRUCTURE),
        ("path-params", Category.STRUCTURE),
        ("no-eval-in-markdown", Category.SECURITY),
        ("no-script-tags-in-markdown", Category.SECURITY),
        ("oas3-operation-security-defined", Category.SECURITY),
        ("operation-operationId-valid-in-url", Category.NAMING_CONVENTIONS),
        ("operation-operationId-unique", Category.NAMING_CONVENTIONS),
        ("path-keys-no-trailing-slash", Category.NAMING_CONVENTIONS),
        ("path-not-include-query", Category.NAMING_CONVENTIONS),
        ("operation-success-response", Category.RESPONSE_DESIGN),
        ("oas3-api-servers", Category.SERVER_CONFIGURATION),
        ("oas2-api-host", Category.SERVER_CONFIGURATION),
        ("oas2-api-schemes", Category.SERVER_CONFIGURATION),
        ("bp-path-casing", Category.BEST_PRACTICE),
        ("bp-response-descriptions", Category.BEST_PRACTICE),
        ("bp-tags-description", Category.BEST_PRACTICE),
        ("custom-best-practice", Category.BEST_PRACTICE),
        ("duplicated-entry-in-enum", Category.GENERAL),
        ("", Category.GENERAL),
    ],
)
def test_known_codes_map_to_categories(code: str, expected: Category) -> None:
    assert categorize(code) is expected


def test_categorize_is_case_insensitive() -> None:
    assert categorize("INFO-CONTACT") is Category.DOCUMENTATION
    assert categorize("Operation-OperationId") is Category.STRUCTURE


def test_best_practice_prefix_only_yields_to_security() -> None:
    assert categorize("bp-auth-required") is Category.SECURITY
    assert categorize("bp-server-urls") is Category.BEST_PRACTICE


def test_first_matching_rule_wins() -> None:
    rules = (
        CategoryRule(Category.NAMING_CONVENTIONS, contains=("x",)),
        CategoryRule(Category.SECURITY, contains=("x",)),
    )

    assert categorize("x-rule", rules) is Category.NAMING_CONVENTIONS
    assert categorize("y-rule", rules) is Category.GENERAL


def test_rules_are_declared_in_priority_order() -> None:
    declared = [rule.category for rule in CATEGORY_RULES]
    priority = [category for category in Category if category is not Category.GENERAL]

    assert declared == priority
