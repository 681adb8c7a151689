"""Serialize a finalized :class:`Document` to PDF bytes with reportlab."""

from __future__ import annotations

import io
import logging

from reportlab.lib.colors import HexColor
from reportlab.pdfgen import canvas

from .compositor import ReportConfig
from .document import Circle, Document, Line, Page, Primitive, Rect, RenderError, TextRun

logger = logging.getLogger(__name__)

BASELINE_FACTOR = 0.8


class PdfWriter:
    """Draw buffered pages onto a reportlab canvas.

    Document coordinates grow downwards from the top-left corner while PDF
    space grows upwards from the bottom-left, so every y value is flipped
    against the page height.
    """

    def __init__(self, config: ReportConfig | None = None) -> None:
        self.config = config or ReportConfig()

    def write(self, document: Document) -> bytes:
        if not document.finalized:
            raise RenderError("Document must be finalized before it is written")

        geometry = document.geometry
        buffer = io.BytesIO()
        try:
            pdf = canvas.Canvas(
                buffer,
                pagesize=(geometry.width, geometry.height),
                invariant=1,
            )
            pdf.setTitle(self.config.report_title)
            pdf.setAuthor(self.config.company_name)
            pdf.setSubject(self.config.subtitle)
            pdf.setCreator(self.config.company_name)

            for page in document.pages:
                self._draw_page(pdf, page, geometry.height)
                pdf.showPage()
            pdf.save()
        except RenderError:
            raise
        except (ArithmeticError, LookupError, TypeError, ValueError, AttributeError) as exc:
            raise RenderError(f"Failed to write PDF: {exc}") from exc

        data = buffer.getvalue()
        logger.debug("report.written pages=%d bytes=%d", document.page_count, len(data))
        return data

    # ------------------------------------------------------------------
    def _draw_page(self, pdf: canvas.Canvas, page: Page, page_height: float) -> None:
        for primitive in (*page.primitives, *page.footer):
            self._draw(pdf, primitive, page_height)

    def _draw(self, pdf: canvas.Canvas, primitive: Primitive, page_height: float) -> None:
        if isinstance(primitive, Rect):
            pdf.setFillColor(HexColor(primitive.fill))
            bottom = page_height - primitive.y - primitive.height
            if primitive.radius:
                pdf.roundRect(
                    primitive.x,
                    bottom,
                    primitive.width,
                    primitive.height,
                    primitive.radius,
                    stroke=0,
                    fill=1,
                )
            else:
                pdf.rect(primitive.x, bottom, primitive.width, primitive.height, stroke=0, fill=1)
        elif isinstance(primitive, Circle):
            pdf.setFillColor(HexColor(primitive.fill))
            pdf.circle(primitive.cx, page_height - primitive.cy, primitive.radius, stroke=0, fill=1)
        elif isinstance(primitive, Line):
            pdf.setStrokeColor(HexColor(primitive.color))
            pdf.setLineWidth(primitive.width)
            pdf.line(
                primitive.x1,
                page_height - primitive.y1,
                primitive.x2,
                page_height - primitive.y2,
            )
        elif isinstance(primitive, TextRun):
            self._draw_text(pdf, primitive, page_height)
        else:
            raise RenderError(f"Unsupported primitive: {type(primitive).__name__}")

    def _draw_text(self, pdf: canvas.Canvas, run: TextRun, page_height: float) -> None:
        pdf.setFillColor(HexColor(run.color))
        pdf.setFont(run.font, run.size)
        baseline = page_height - (run.y + run.size * BASELINE_FACTOR)

        if run.width is None or run.align == "left":
            pdf.drawString(run.x, baseline, run.text)
        elif run.align == "center":
            pdf.drawCentredString(run.x + run.width / 2, baseline, run.text)
        elif run.align == "right":
            pdf.drawRightString(run.x + run.width, baseline, run.text)
        else:
            raise RenderError(f"Unsupported text alignment: {run.align}")
