"""Compose and deliver the report notification email."""

from __future__ import annotations

import html
import logging
import smtplib
from email.message import EmailMessage
from typing import List, Protocol, runtime_checkable

from ..models import DiffReport, Summary

logger = logging.getLogger(__name__)

SENDER_NAME = "API Governance"


class TransportError(RuntimeError):
    """Raised when a notification cannot be delivered."""


@runtime_checkable
class NotificationTransport(Protocol):
    def send(self, message: EmailMessage) -> None: ...


def email_subject(subject: str, version: str, summary: Summary) -> str:
    status = "PASSED" if summary.passed else "FAILED"
    return f"API Validation Report: {subject} v{version} - {status}"


def attachment_name(subject: str, version: str) -> str:
    return f"validation-report-{subject}-{version}.pdf"


def _signed(value: int) -> str:
    return f"+{value}" if value > 0 else str(value)


def build_text_body(
    owner: str,
    subject: str,
    version: str,
    summary: Summary,
    report_url: str,
    diff: DiffReport | None = None,
) -> str:
    lines: List[str] = [
        "API VALIDATION REPORT",
        "====================",
        "",
        f"API: {subject}",
        f"Version: {version}",
        f"Owner: {owner}",
        f"Status: {'PASSED' if summary.passed else 'FAILED'}",
        f"Score: {summary.score}/100",
        "",
        "SUMMARY",
        "-------",
        f"Total Issues: {summary.total_issues}",
        f"  Errors:   {summary.errors}",
        f"  Warnings: {summary.warnings}",
        f"  Info:     {summary.info}",
        f"  Hints:    {summary.hints}",
    ]

    if diff is not None and diff.has_baseline:
        lines.extend(
            [
                "",
                "CHANGES SINCE LAST SCAN",
                "-----------------------",
                f"Previous version: {diff.previous_version or 'unknown'}",
                f"Score change: {_signed(diff.score_change)}",
                f"Resolved issues: {len(diff.resolved_issues)}",
                f"New issues: {len(diff.new_issues)}",
            ]
        )

    lines.extend(
        [
            "",
            f"Download the full PDF report: {report_url}",
            "",
            "(The PDF report is also attached to this email.)",
            "",
            "---",
            "Automated API Governance Validation",
        ]
    )
    return "\n".join(lines)


def build_html_body(
    owner: str,
    subject: str,
    version: str,
    summary: Summary,
    report_url: str,
    diff: DiffReport | None = None,
) -> str:
    esc = html.escape
    status_color = "#16a34a" if summary.passed else "#dc2626"
    status_text = "PASSED" if summary.passed else "FAILED"

    rows = [
        ("Total Issues", summary.total_issues, "#111827"),
        ("Errors", summary.errors, "#dc2626"),
        ("Warnings", summary.warnings, "#f59e0b"),
        ("Informational", summary.info, "#3b82f6"),
        ("Hints", summary.hints, "#6b7280"),
    ]
    metric_rows = "".join(
        f'<tr><td style="color: {color}">{label}</td>'
        f'<td style="text-align: center; font-weight: bold; color: {color}">{value}</td></tr>'
        for label, value, color in rows
    )

    category_table = ""
    if summary.categories:
        category_rows = "".join(
            f"<tr><td>{esc(name)}</td><td style=\"text-align: center\">{counts.count}</td>"
            f"<td style=\"text-align: center\">{counts.errors}</td></tr>"
            for name, counts in summary.categories.items()
        )
        category_table = (
            "<h3>Issues by Category</h3>"
            "<table><tr><th>Category</th><th>Issues</th><th>Errors</th></tr>"
            f"{category_rows}</table>"
        )

    diff_block = ""
    if diff is not None and diff.has_baseline:
        diff_block = (
            "<h3>Changes Since Last Scan</h3>"
            f"<p>Compared with version {esc(diff.previous_version or 'unknown')}</p>"
            "<table>"
            f"<tr><td>Score change</td><td>{_signed(diff.score_change)}</td></tr>"
            f"<tr><td>Resolved issues</td><td>{len(diff.resolved_issues)}</td></tr>"
            f"<tr><td>New issues</td><td>{len(diff.new_issues)}</td></tr>"
            "</table>"
        )

    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"></head>"
        "<body style=\"font-family: sans-serif; background: #f3f4f6\">"
        "<div style=\"background: #1a56db; color: white; padding: 24px; text-align: center\">"
        "<h1>API Validation Report</h1><p>Automated SwaggerHub Spec Analysis</p></div>"
        f"<div style=\"background: {status_color}; color: white; padding: 12px; text-align: center\">"
        f"<h2>Validation {status_text}</h2></div>"
        "<div style=\"background: white; padding: 24px\">"
        f"<h3>{esc(subject)}</h3>"
        f"<p><strong>Version:</strong> {esc(version)}</p>"
        f"<p><strong>Owner:</strong> {esc(owner)}</p>"
        f"<p><strong>Quality Score:</strong> {summary.score}/100</p>"
        f"<table><tr><th>Metric</th><th>Count</th></tr>{metric_rows}</table>"
        f"{category_table}{diff_block}"
        "<p>The full PDF report is attached to this email.</p>"
        f"<p><a href=\"{esc(report_url, quote=True)}\">Download Full Report</a></p>"
        "</div>"
        "<p style=\"font-size: 12px; color: #9ca3af; text-align: center\">"
        "This report was automatically generated by the API Governance validation pipeline.</p>"
        "</body></html>"
    )


def build_report_email(
    *,
    sender: str,
    recipient: str,
    owner: str,
    subject: str,
    version: str,
    summary: Summary,
    report_url: str,
    pdf: bytes,
    diff: DiffReport | None = None,
) -> EmailMessage:
    """Multipart message with text and HTML alternatives plus the PDF attachment."""

    message = EmailMessage()
    message["From"] = f"{SENDER_NAME} <{sender}>"
    message["To"] = recipient
    message["Subject"] = email_subject(subject, version, summary)

    message.set_content(build_text_body(owner, subject, version, summary, report_url, diff))
    message.add_alternative(
        build_html_body(owner, subject, version, summary, report_url, diff), subtype="html"
    )
    message.add_attachment(
        pdf,
        maintype="application",
        subtype="pdf",
        filename=attachment_name(subject, version),
    )
    return message


class SmtpTransport:
    """Deliver messages through an SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int = 25,
        *,
        use_tls: bool = False,
        username: str | None = None,
        password: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.use_tls = use_tls
        self.username = username
        self.password = password
        self.timeout = timeout

    def send(self, message: EmailMessage) -> None:
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as client:
                if self.use_tls:
                    client.starttls()
                if self.username:
                    client.login(self.username, self.password or "")
                client.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise TransportError(f"Failed to send email via {self.host}:{self.port}: {exc}") from exc

        logger.info("email.sent recipient=%s", message["To"])
