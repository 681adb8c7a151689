"""Keyword rules that assign each lint rule code to a category."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..models import Category


@dataclass(slots=True, frozen=True)
class CategoryRule:
    """Substring tests over a case-folded rule code."""

    category: Category
    prefixes: tuple[str, ...] = ()
    suffixes: tuple[str, ...] = ()
    contains: tuple[str, ...] = ()
    exclude_prefixes: tuple[str, ...] = ()

    def matches(self, folded_code: str) -> bool:
        if any(folded_code.startswith(prefix) for prefix in self.exclude_prefixes):
            return False
        return (
            any(folded_code.startswith(prefix) for prefix in self.prefixes)
            or any(folded_code.endswith(suffix) for suffix in self.suffixes)
            or any(needle in folded_code for needle in self.contains)
        )


_BEST_PRACTICE_PREFIX = "bp-"

# Evaluated top-down; the first matching rule wins.
CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        Category.SPEC_COMPLIANCE,
        contains=("oas2-schema", "oas3-schema", "valid-schema-example", "valid-media-example"),
        exclude_prefixes=(_BEST_PRACTICE_PREFIX,),
    ),
    CategoryRule(
        Category.DOCUMENTATION,
        prefixes=("info-",),
        contains=("operation-description", "contact", "license"),
        exclude_prefixes=(_BEST_PRACTICE_PREFIX,),
    ),
    CategoryRule(
        Category.STRUCTURE,
        suffixes=("-operationid", "-tags"),
        contains=("path-params",),
        exclude_prefixes=(_BEST_PRACTICE_PREFIX,),
    ),
    CategoryRule(
        Category.SECURITY,
        contains=("eval-in-markdown", "script-tags", "security", "auth"),
    ),
    CategoryRule(
        Category.NAMING_CONVENTIONS,
        contains=(
            "operationid-valid-in-url",
            "operationid-unique",
            "trailing-slash",
            "include-query",
            "naming",
        ),
        exclude_prefixes=(_BEST_PRACTICE_PREFIX,),
    ),
    CategoryRule(
        Category.RESPONSE_DESIGN,
        contains=("response",),
        exclude_prefixes=(_BEST_PRACTICE_PREFIX,),
    ),
    CategoryRule(
        Category.SERVER_CONFIGURATION,
        contains=("api-servers", "api-host", "api-schemes", "server"),
        exclude_prefixes=(_BEST_PRACTICE_PREFIX,),
    ),
    CategoryRule(
        Category.BEST_PRACTICE,
        prefixes=(_BEST_PRACTICE_PREFIX,),
        contains=("best-practice",),
    ),
)


def categorize(code: str, rules: Sequence[CategoryRule] = CATEGORY_RULES) -> Category:
    """Return the category of the first rule matching ``code``."""

    folded = code.casefold()
    for rule in rules:
        if rule.matches(folded):
            return rule.category
    return Category.GENERAL
