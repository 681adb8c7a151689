from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from lint_report_service.normalization import IssueNormalizer
from lint_report_service.report import (
    Document,
    PdfWriter,
    RenderError,
    ReportCompositor,
    ReportPayload,
)
from lint_report_service.report.document import Block, TextRun


def _render(petstore_payload: dict[str, Any]) -> Document:
    result = IssueNormalizer().normalize_payload(petstore_payload)
    return ReportCompositor().render(
        ReportPayload(
            owner="acme",
            subject="petstore",
            version="1.0.0",
            result=result,
            generated_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        )
    )


def test_writes_pdf_bytes(petstore_payload: dict[str, Any]) -> None:
    data = PdfWriter().write(_render(petstore_payload))

    assert data.startswith(b"%PDF")
    assert data.rstrip().endswith(b"%%EOF")


def test_output_is_deterministic(petstore_payload: dict[str, Any]) -> None:
    writer = PdfWriter()

    first = writer.write(_render(petstore_payload))
    second = writer.write(_render(petstore_payload))

    assert first == second


def test_unfinalized_document_is_rejected() -> None:
    document = Document()
    document.start_page()

    with pytest.raises(RenderError):
        PdfWriter().write(document)


def test_unknown_alignment_raises_render_error() -> None:
    document = Document()
    block = Block("bad", height=20)
    block.add(TextRun(50, 0, "text", "Helvetica", 10, "#000000", width=100, align="justify"))
    document.place(block)
    document.finalize(lambda index, total: None)

    with pytest.raises(RenderError):
        PdfWriter().write(document)

