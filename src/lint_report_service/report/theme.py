"""Colour palette, fonts, and text measurement for the PDF report."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth

from ..models import Severity

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
LINE_HEIGHT_FACTOR = 1.2
ELLIPSIS = "..."


@dataclass(slots=True, frozen=True)
class Theme:
    primary: str = "#1a56db"
    secondary: str = "#374151"
    error: str = "#dc2626"
    warning: str = "#f59e0b"
    info: str = "#3b82f6"
    hint: str = "#6b7280"
    success: str = "#16a34a"
    light_gray: str = "#f3f4f6"
    white: str = "#ffffff"
    black: str = "#111827"

    def severity_color(self, severity: Severity) -> str:
        return {
            Severity.ERROR: self.error,
            Severity.WARNING: self.warning,
            Severity.INFORMATION: self.info,
            Severity.HINT: self.hint,
        }.get(severity, self.secondary)

    def score_color(self, score: int) -> str:
        if score >= 80:
            return self.success
        if score >= 50:
            return self.warning
        return self.error

    def delta_color(self, change: int) -> str:
        if change > 0:
            return self.success
        if change < 0:
            return self.error
        return self.secondary

    def priority_color(self, priority: str) -> str:
        if priority == "High":
            return self.error
        if priority == "Medium":
            return self.warning
        return self.info


def line_height(size: float) -> float:
    return size * LINE_HEIGHT_FACTOR


def text_width(text: str, font: str, size: float) -> float:
    return stringWidth(text, font, size)


def wrap_text(text: str, font: str, size: float, width: float, max_lines: int | None = None) -> List[str]:
    """Split ``text`` into lines no wider than ``width``; empty text yields one empty line."""

    lines: List[str] = []
    for paragraph in (text or "").splitlines() or [""]:
        lines.extend(simpleSplit(paragraph, font, size, width) or [""])

    if max_lines is not None and len(lines) > max_lines:
        lines = lines[:max_lines]
        lines[-1] = truncate_text(lines[-1] + " " + ELLIPSIS, font, size, width)
    return lines


def truncate_text(text: str, font: str, size: float, width: float) -> str:
    """Cut ``text`` to a single line that fits ``width``, marking the cut."""

    if text_width(text, font, size) <= width:
        return text
    trimmed = text
    while trimmed and text_width(trimmed + ELLIPSIS, font, size) > width:
        trimmed = trimmed[:-1]
    return trimmed.rstrip() + ELLIPSIS
