"""Fixed recommendation table keyed on the categories present in a summary."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from ..models import Category, Summary


@dataclass(slots=True, frozen=True)
class Recommendation:
    title: str
    body: str
    priority: str


@dataclass(slots=True, frozen=True)
class RecommendationRule:
    category: Category
    recommendation: Recommendation
    requires_errors: bool = False

    def applies(self, summary: Summary) -> bool:
        counts = summary.categories.get(self.category.value)
        if counts is None:
            return False
        if self.requires_errors:
            return counts.errors > 0
        return True


RECOMMENDATION_RULES: tuple[RecommendationRule, ...] = (
    RecommendationRule(
        Category.SPEC_COMPLIANCE,
        Recommendation(
            title="Fix OpenAPI Specification Errors",
            body=(
                "Your API specification contains schema errors that violate the OpenAPI "
                "standard. These must be fixed to ensure compatibility with API tools and "
                "gateways. Use the SwaggerHub editor to identify and correct these issues."
            ),
            priority="High",
        ),
        requires_errors=True,
    ),
    RecommendationRule(
        Category.DOCUMENTATION,
        Recommendation(
            title="Improve API Documentation",
            body=(
                "Add missing descriptions, contact information, and licensing details. "
                "Well-documented APIs are easier for consumers to understand and integrate with."
            ),
            priority="Medium",
        ),
    ),
    RecommendationRule(
        Category.NAMING_CONVENTIONS,
        Recommendation(
            title="Standardize Naming Conventions",
            body=(
                "Ensure all URL paths use kebab-case and operation IDs follow a consistent "
                "pattern. Consistent naming improves developer experience and API discoverability."
            ),
            priority="Medium",
        ),
    ),
    RecommendationRule(
        Category.RESPONSE_DESIGN,
        Recommendation(
            title="Define Complete Response Models",
            body=(
                "Ensure all operations define success and error responses with appropriate "
                "schemas. Include standard error response models (400, 401, 404, 500) for "
                "consistency."
            ),
            priority="Medium",
        ),
    ),
    RecommendationRule(
        Category.SECURITY,
        Recommendation(
            title="Address Security Findings",
            body=(
                "Review and remediate security-related findings. Ensure proper authentication "
                "schemes are defined and no sensitive data is exposed in the specification."
            ),
            priority="High",
        ),
    ),
    RecommendationRule(
        Category.BEST_PRACTICE,
        Recommendation(
            title="Adopt API Design Best Practices",
            body=(
                "Review the best practice findings and align your API design with "
                "organizational standards. This includes proper error handling, consistent "
                "patterns, and comprehensive schemas."
            ),
            priority="Low",
        ),
    ),
)

MAINTAIN_QUALITY = Recommendation(
    title="Maintain Quality Standards",
    body=(
        "Your API specification meets all validation criteria. Continue following API "
        "design best practices and re-validate whenever changes are made."
    ),
    priority="Low",
)


def build_recommendations(
    summary: Summary,
    rules: Sequence[RecommendationRule] = RECOMMENDATION_RULES,
) -> List[Recommendation]:
    recommendations = [rule.recommendation for rule in rules if rule.applies(summary)]
    return recommendations or [MAINTAIN_QUALITY]
