"""Lay out the validation report as a buffered, paginated :class:`Document`."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence

from ..models import CategoryCounts, DiffReport, Issue, NormalizationResult, Summary
from .document import Block, Circle, Document, Line, PageGeometry, Rect, RenderError, TextRun
from .recommendations import build_recommendations
from .theme import (
    FONT_BOLD,
    FONT_REGULAR,
    Theme,
    line_height,
    truncate_text,
    wrap_text,
)

logger = logging.getLogger(__name__)

MAX_BAR_WIDTH = 300.0
MAX_MESSAGE_LINES = 12
# a category block with this many samples still fits on one page
MAX_CATEGORY_SAMPLE_LIMIT = 40
MAX_DIFF_PREVIEW_LIMIT = 100


@dataclass(slots=True, frozen=True)
class ReportConfig:
    """Branding and layout options passed explicitly into the compositor."""

    report_title: str = "API Validation Report"
    subtitle: str = "Automated API Specification Analysis"
    company_name: str = "API Governance Team"
    diff_preview_limit: int = 15
    category_sample_limit: int = 5
    theme: Theme = field(default_factory=Theme)
    geometry: PageGeometry = field(default_factory=PageGeometry)


@dataclass(slots=True, frozen=True)
class ReportPayload:
    owner: str
    subject: str
    version: str
    result: NormalizationResult
    diff: DiffReport | None = None
    generated_at: datetime | None = None

    @property
    def summary(self) -> Summary:
        return self.result.summary

    @property
    def issues(self) -> tuple[Issue, ...]:
        return self.result.issues


def category_bar_segments(
    counts: CategoryCounts,
    max_count: int,
    max_width: float = MAX_BAR_WIDTH,
) -> tuple[float, float, float]:
    """Widths of the error, warning, and other segments of a category bar."""

    if max_count <= 0 or counts.count <= 0:
        return 0.0, 0.0, 0.0

    bar_width = counts.count / max_count * max_width
    error_width = counts.errors / counts.count * bar_width
    warning_width = counts.warnings / counts.count * bar_width
    other_width = max(0.0, bar_width - error_width - warning_width)
    return error_width, warning_width, other_width


def summary_narrative(subject: str, version: str, summary: Summary) -> str:
    parts = [
        f'The API specification "{subject}" (version {version}) was analyzed against '
        "OpenAPI compliance rules and API design best practices."
    ]

    if summary.total_issues == 0:
        parts.append("The specification passed all validation checks with no issues detected.")
    else:
        parts.append(
            f"A total of {summary.total_issues} issue(s) were identified: "
            f"{summary.errors} error(s), {summary.warnings} warning(s), and "
            f"{summary.info} informational finding(s)."
        )

    if summary.passed:
        parts.append("The API specification PASSED validation with no critical errors.")
    else:
        parts.append(
            "The API specification FAILED validation due to critical errors that must be "
            "resolved before the API can be approved for production use."
        )
    return " ".join(parts)


def _signed(value: int) -> str:
    return f"+{value}" if value > 0 else str(value)


class ReportCompositor:
    """Render summary, findings, and diff into an ordered list of pages."""

    def __init__(self, config: ReportConfig | None = None) -> None:
        self.config = config or ReportConfig()
        self.theme = self.config.theme
        self.geometry = self.config.geometry

    def render(self, payload: ReportPayload) -> Document:
        """Return the finalized document; layout failures raise :class:`RenderError`."""

        try:
            document = Document(self.geometry)
            self._add_cover_page(document, payload)
            self._add_executive_summary(document, payload)
            if payload.diff is not None and payload.diff.has_baseline:
                self._add_diff_section(document, payload.diff, payload.summary)
            self._add_detailed_findings(document, payload.issues)
            self._add_category_analysis(document, payload)
            self._add_recommendations(document, payload.summary)
            document.finalize(lambda index, total: self._stamp_footer(document, index, total))
        except RenderError:
            raise
        except (ArithmeticError, LookupError, TypeError, ValueError) as exc:
            raise RenderError(f"Failed to lay out report: {exc}") from exc

        logger.debug("report.composed pages=%d subject=%s", document.page_count, payload.subject)
        return document

    # Sections ------------------------------------------------------------------
    def _add_cover_page(self, document: Document, payload: ReportPayload) -> None:
        theme = self.theme
        width = self.geometry.width
        center_x = width / 2
        page = document.start_page()
        page.decorate(Rect(0, 0, width, 8, theme.primary))
        document.skip(90)

        title = Block("cover:title", height=80)
        self._centered(title, 0, self.config.report_title, FONT_BOLD, 32, theme.primary)
        self._centered(title, 48, self.config.subtitle, FONT_REGULAR, 14, theme.secondary)
        document.place(title)

        divider = Block("cover:divider", height=30)
        divider.add(Line(150, 15, width - 150, 15, theme.primary, 2))
        document.place(divider)

        subject = Block("cover:subject", height=90)
        self._centered(subject, 0, payload.subject, FONT_BOLD, 20, theme.black)
        self._centered(subject, 32, f"Version: {payload.version}", FONT_REGULAR, 14, theme.secondary)
        self._centered(subject, 52, f"Owner: {payload.owner}", FONT_REGULAR, 14, theme.secondary)
        document.place(subject)

        score = payload.summary.score
        score_block = Block("cover:score", height=150)
        score_block.add(Circle(center_x, 50, 50, theme.score_color(score)))
        score_block.add(
            TextRun(center_x - 50, 28, str(score), FONT_BOLD, 36, theme.white, 100, "center")
        )
        score_block.add(
            TextRun(center_x - 50, 66, "/100", FONT_REGULAR, 10, theme.white, 100, "center")
        )
        self._centered(score_block, 115, "API Quality Score", FONT_REGULAR, 12, theme.secondary)
        document.place(score_block)

        passed = payload.summary.passed
        banner_color = theme.success if passed else theme.error
        banner = Block("cover:status", height=50)
        banner.add(Rect(center_x - 150, 0, 300, 30, banner_color, radius=6))
        self._centered(
            banner,
            7,
            "PASSED VALIDATION" if passed else "VALIDATION FAILED",
            FONT_BOLD,
            16,
            theme.white,
        )
        document.place(banner)

        document.skip(40)
        generated_at = payload.generated_at or datetime.now(timezone.utc)
        meta = Block("cover:meta", height=34)
        self._centered(
            meta,
            0,
            f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M %Z').strip()}",
            FONT_REGULAR,
            10,
            theme.secondary,
        )
        self._centered(meta, 16, f"By: {self.config.company_name}", FONT_REGULAR, 10, theme.secondary)
        document.place(meta)

    def _add_executive_summary(self, document: Document, payload: ReportPayload) -> None:
        theme = self.theme
        summary = payload.summary
        document.start_page()
        self._section_header(document, "Executive Summary")
        document.skip(10)

        stats = Block("summary:stats", height=85)
        tiles = (
            ("Total Issues", summary.total_issues, theme.primary),
            ("Errors", summary.errors, theme.error),
            ("Warnings", summary.warnings, theme.warning),
            ("Info", summary.info, theme.info),
        )
        for index, (label, value, color) in enumerate(tiles):
            x = 55 + index * 120
            stats.add(Rect(x, 0, 105, 65, theme.light_gray, radius=5))
            stats.add(TextRun(x + 5, 8, str(value), FONT_BOLD, 28, color, 95, "center"))
            stats.add(TextRun(x + 5, 42, label, FONT_REGULAR, 10, theme.secondary, 95, "center"))
        document.place(stats)

        self._paragraph(
            document,
            "summary:narrative",
            summary_narrative(payload.subject, payload.version, summary),
            size=11,
            color=theme.black,
            gap=4,
        )

        document.skip(10)
        self._sub_header(document, "Issues by Category")
        self._table_header(
            document,
            "summary:category-header",
            ("Category", "Issues", "Errors", "Warnings"),
        )

        if not summary.categories:
            self._table_row(
                document,
                "summary:category-empty",
                0,
                (("No categorized issues", theme.black), ("0", theme.black), ("0", theme.black), ("0", theme.black)),
            )
            return

        for index, (category, counts) in enumerate(summary.categories.items()):
            self._table_row(
                document,
                f"summary:category:{category}",
                index,
                (
                    (category, theme.black),
                    (str(counts.count), theme.black),
                    (str(counts.errors), theme.error if counts.errors > 0 else theme.black),
                    (str(counts.warnings), theme.warning if counts.warnings > 0 else theme.black),
                ),
            )

    def _add_diff_section(self, document: Document, diff: DiffReport, summary: Summary) -> None:
        theme = self.theme
        document.start_page()
        self._section_header(document, "Changes Since Last Scan")

        caption = f"Compared with version {diff.previous_version or 'unknown'}"
        if diff.previous_scanned_at:
            caption += f", scanned {diff.previous_scanned_at}"
        caption_block = Block("diff:caption", height=22)
        caption_block.add(
            TextRun(
                50,
                0,
                truncate_text(caption, FONT_REGULAR, 10, self.geometry.content_width),
                FONT_REGULAR,
                10,
                theme.secondary,
            )
        )
        document.place(caption_block)

        scores = Block("diff:scores", height=100)
        previous_text = "N/A" if diff.previous_score is None else str(diff.previous_score)
        previous_color = (
            theme.secondary if diff.previous_score is None else theme.score_color(diff.previous_score)
        )
        for x, label, value, color in (
            (55, "Previous Score", previous_text, previous_color),
            (235, "Current Score", str(diff.current_score), theme.score_color(diff.current_score)),
        ):
            scores.add(Rect(x, 0, 150, 80, theme.light_gray, radius=5))
            scores.add(TextRun(x, 10, label, FONT_REGULAR, 10, theme.secondary, 150, "center"))
            scores.add(TextRun(x, 32, value, FONT_BOLD, 28, color, 150, "center"))
        scores.add(Rect(415, 20, 120, 40, theme.delta_color(diff.score_change), radius=20))
        scores.add(
            TextRun(415, 30, _signed(diff.score_change), FONT_BOLD, 18, theme.white, 120, "center")
        )
        scores.add(TextRun(415, 66, "Score Change", FONT_REGULAR, 9, theme.secondary, 120, "center"))
        document.place(scores)

        self._sub_header(document, "Issue Counts")
        self._table_header(document, "diff:counts-header", ("Metric", "Previous", "Current", "Change"))
        delta = diff.summary_delta
        rows = (
            ("Total Issues", summary.total_issues, delta.total_issues),
            ("Errors", summary.errors, delta.errors),
            ("Warnings", summary.warnings, delta.warnings),
            ("Info", summary.info, delta.info),
            ("Hints", summary.hints, delta.hints),
        )
        for index, (label, current, change) in enumerate(rows):
            # fewer issues is an improvement, so the colour is inverted
            self._table_row(
                document,
                f"diff:counts:{label}",
                index,
                (
                    (label, theme.black),
                    (str(current - change), theme.black),
                    (str(current), theme.black),
                    (_signed(change), theme.delta_color(-change)),
                ),
            )

        document.skip(10)
        self._issue_preview(document, "resolved", "Resolved Issues", diff.resolved_issues, theme.success)
        document.skip(6)
        self._issue_preview(document, "new", "New Issues", diff.new_issues, theme.error)

        unchanged = Block("diff:unchanged", height=24)
        unchanged.add(
            TextRun(
                50,
                8,
                f"Unchanged issues: {len(diff.persisting_issues)}",
                FONT_REGULAR,
                10,
                theme.secondary,
            )
        )
        document.place(unchanged)

    def _add_detailed_findings(self, document: Document, issues: Sequence[Issue]) -> None:
        theme = self.theme
        document.start_page()
        self._section_header(document, "Detailed Findings")
        document.skip(5)

        if not issues:
            empty = Block("findings:empty", height=30)
            self._centered(
                empty,
                0,
                "No issues found! Your API specification is clean.",
                FONT_REGULAR,
                14,
                theme.success,
            )
            document.place(empty)
            return

        for number, issue in enumerate(issues, start=1):
            document.place(self._issue_block(number, issue))

    def _add_category_analysis(self, document: Document, payload: ReportPayload) -> None:
        theme = self.theme
        summary = payload.summary
        document.start_page()
        self._section_header(document, "Category Analysis")
        document.skip(10)

        if not summary.categories:
            empty = Block("categories:empty", height=24)
            empty.add(TextRun(50, 0, "No issues to analyze.", FONT_REGULAR, 11, theme.secondary))
            document.place(empty)
            return

        max_count = summary.max_category_count
        sample_width = self.geometry.content_width - 45
        for category, counts in summary.categories.items():
            block = Block(f"categories:{category}")
            block.add(TextRun(50, 0, category, FONT_BOLD, 12, theme.primary))

            bar_y = line_height(12) + 2
            x = 55.0
            for width, color in zip(
                category_bar_segments(counts, max_count),
                (theme.error, theme.warning, theme.info),
            ):
                if width > 0:
                    block.add(Rect(x, bar_y, width, 14, color))
                    x += width
            block.add(TextRun(x + 10, bar_y + 2, f"{counts.count} issues", FONT_REGULAR, 10, theme.black))

            y = bar_y + 26
            category_issues = [issue for issue in payload.issues if issue.category.value == category]
            limit = self.config.category_sample_limit
            for issue in category_issues[:limit]:
                block.add(Circle(66, y + 5, 2.5, theme.severity_color(issue.severity)))
                block.add(
                    TextRun(
                        74,
                        y,
                        truncate_text(issue.message, FONT_REGULAR, 9, sample_width),
                        FONT_REGULAR,
                        9,
                        theme.black,
                    )
                )
                y += 13
            if len(category_issues) > limit:
                block.add(
                    TextRun(
                        60,
                        y,
                        f"... and {len(category_issues) - limit} more",
                        FONT_REGULAR,
                        9,
                        theme.secondary,
                    )
                )
                y += 13

            block.height = y + 12
            document.place(block)

    def _add_recommendations(self, document: Document, summary: Summary) -> None:
        theme = self.theme
        document.start_page()
        self._section_header(document, "Recommendations")
        document.skip(10)

        body_width = self.geometry.content_width - 15
        for number, recommendation in enumerate(build_recommendations(summary), start=1):
            block = Block(f"recommendations:{number}")
            block.add(TextRun(50, 0, f"{number}. {recommendation.title}", FONT_BOLD, 11, theme.primary))
            y = line_height(11) + 2
            for text_line in wrap_text(recommendation.body, FONT_REGULAR, 10, body_width):
                block.add(TextRun(65, y, text_line, FONT_REGULAR, 10, theme.black))
                y += line_height(10) + 3
            block.add(
                TextRun(
                    65,
                    y,
                    f"Priority: {recommendation.priority}",
                    FONT_BOLD,
                    9,
                    theme.priority_color(recommendation.priority),
                )
            )
            block.height = y + line_height(9) + 12
            document.place(block)

        document.skip(20)
        self._paragraph(
            document,
            "recommendations:closing",
            "This report was automatically generated by the API Governance validation pipeline. "
            f"For questions or to request exceptions, contact the {self.config.company_name}.",
            size=10,
            color=theme.secondary,
            gap=3,
            align="center",
        )

    # Finalization --------------------------------------------------------------
    def _stamp_footer(self, document: Document, index: int, total: int) -> None:
        geometry = self.geometry
        page = document.pages[index]
        page.stamp(
            TextRun(
                geometry.margin_left,
                geometry.height - 62,
                f"Page {index + 1} of {total}",
                FONT_REGULAR,
                8,
                self.theme.secondary,
                geometry.content_width,
                "center",
            )
        )
        page.stamp(Rect(0, geometry.height - 8, geometry.width, 8, self.theme.primary))

    # Building blocks -----------------------------------------------------------
    def _issue_block(self, number: int, issue: Issue) -> Block:
        theme = self.theme
        color = theme.severity_color(issue.severity)
        block = Block(f"findings:{number}")

        badge_width = len(issue.severity.value) * 6 + 12
        block.add(TextRun(62, 2, f"#{number}", FONT_BOLD, 10, theme.black))
        block.add(Rect(90, 0, badge_width, 16, color, radius=3))
        block.add(TextRun(96, 4, issue.severity.label, FONT_BOLD, 8, theme.white))
        rule_x = 90 + badge_width + 8
        block.add(
            TextRun(
                rule_x,
                4,
                truncate_text(
                    f"Rule: {issue.code}",
                    FONT_REGULAR,
                    8,
                    self.geometry.width - self.geometry.margin_right - rule_x,
                ),
                FONT_REGULAR,
                8,
                theme.secondary,
            )
        )

        y = 20.0
        for text_line in wrap_text(issue.message, FONT_REGULAR, 10, 470, max_lines=MAX_MESSAGE_LINES):
            block.add(TextRun(62, y, text_line, FONT_REGULAR, 10, theme.black))
            y += line_height(10)

        location = issue.location.describe()
        if location:
            y += 2
            for text_line in wrap_text(f"Path: {location}", FONT_REGULAR, 8, 470, max_lines=3):
                block.add(TextRun(62, y, text_line, FONT_REGULAR, 8, theme.info))
                y += line_height(8)

        block.primitives.insert(0, Rect(50, 0, 4, y, color))
        block.height = y + 12
        return block

    def _issue_preview(
        self,
        document: Document,
        key: str,
        title: str,
        issues: Sequence[Issue],
        color: str,
    ) -> None:
        theme = self.theme
        self._sub_header(document, f"{title} ({len(issues)})")
        limit = self.config.diff_preview_limit
        width = self.geometry.content_width - 25

        if not issues:
            none_block = Block(f"diff:{key}:none", height=16)
            none_block.add(TextRun(60, 0, "None", FONT_REGULAR, 9, theme.secondary))
            document.place(none_block)
            return

        for index, issue in enumerate(issues[:limit]):
            line = Block(f"diff:{key}:{index}", height=14)
            line.add(Circle(62, 5, 2.5, color))
            text = f"[{issue.severity.value}] {issue.code}: {issue.message}"
            line.add(TextRun(70, 0, truncate_text(text, FONT_REGULAR, 9, width), FONT_REGULAR, 9, theme.black))
            document.place(line)

        if len(issues) > limit:
            overflow = Block(f"diff:{key}:overflow", height=14)
            overflow.add(
                TextRun(60, 0, f"... and {len(issues) - limit} more", FONT_REGULAR, 9, theme.secondary)
            )
            document.place(overflow)

    def _section_header(self, document: Document, title: str) -> None:
        block = Block(f"section:{title}", height=45)
        block.add(Rect(0, 0, self.geometry.width, 35, self.theme.primary))
        block.add(TextRun(55, 8, title, FONT_BOLD, 18, self.theme.white))
        document.place(block)

    def _sub_header(self, document: Document, title: str) -> None:
        block = Block(f"subheader:{title}", height=line_height(13) + 6)
        block.add(TextRun(50, 0, title, FONT_BOLD, 13, self.theme.primary))
        document.place(block)

    def _table_header(self, document: Document, label: str, titles: Sequence[str]) -> None:
        block = Block(label, height=22)
        block.add(Rect(50, 0, self.geometry.content_width, 22, self.theme.primary))
        self._table_cells(block, 6, [(title, self.theme.white) for title in titles], FONT_BOLD)
        document.place(block)

    def _table_row(
        self,
        document: Document,
        label: str,
        index: int,
        cells: Sequence[tuple[str, str]],
    ) -> None:
        fill = self.theme.light_gray if index % 2 == 0 else self.theme.white
        block = Block(label, height=20)
        block.add(Rect(50, 0, self.geometry.content_width, 20, fill))
        self._table_cells(block, 5, cells, FONT_REGULAR)
        document.place(block)

    def _table_cells(
        self,
        block: Block,
        y: float,
        cells: Sequence[tuple[str, str]],
        font: str,
    ) -> None:
        (first, first_color), *rest = cells
        block.add(TextRun(60, y, truncate_text(first, font, 10, 280), font, 10, first_color))
        for (text, color), (x, width) in zip(rest, ((350, 60), (410, 60), (470, 70))):
            block.add(TextRun(x, y, text, font, 10, color, width, "center"))

    def _paragraph(
        self,
        document: Document,
        label: str,
        text: str,
        *,
        size: float,
        color: str,
        gap: float = 0.0,
        align: str = "left",
    ) -> None:
        width = self.geometry.content_width
        block = Block(label)
        y = 0.0
        for text_line in wrap_text(text, FONT_REGULAR, size, width):
            block.add(TextRun(50, y, text_line, FONT_REGULAR, size, color, width, align))
            y += line_height(size) + gap
        block.height = y + 8
        document.place(block)

    def _centered(
        self,
        block: Block,
        y: float,
        text: str,
        font: str,
        size: float,
        color: str,
    ) -> None:
        width = self.geometry.content_width
        block.add(
            TextRun(
                self.geometry.margin_left,
                y,
                truncate_text(text, font, size, width),
                font,
                size,
                color,
                width,
                "center",
            )
        )
