"""Paginated PDF report composition."""

from .compositor import (
    ReportCompositor,
    ReportConfig,
    ReportPayload,
    category_bar_segments,
    summary_narrative,
)
from .document import Block, Document, Page, PageGeometry, RenderError
from .pdf_writer import PdfWriter
from .recommendations import (
    MAINTAIN_QUALITY,
    RECOMMENDATION_RULES,
    Recommendation,
    RecommendationRule,
    build_recommendations,
)
from .theme import Theme

__all__ = [
    "Block",
    "Document",
    "MAINTAIN_QUALITY",
    "Page",
    "PageGeometry",
    "PdfWriter",
    "RECOMMENDATION_RULES",
    "Recommendation",
    "RecommendationRule",
    "RenderError",
    "ReportCompositor",
    "ReportConfig",
    "ReportPayload",
    "Theme",
    "build_recommendations",
    "category_bar_segments",
    "summary_narrative",
]
