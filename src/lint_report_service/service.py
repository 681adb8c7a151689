"""Orchestration of one validation run, from webhook to delivered report."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Protocol

from .adapters import (
    DocumentSink,
    LocalDocumentSink,
    LocalSnapshotStore,
    MetricsRecorder,
    NotificationTransport,
    SinkIOError,
    SmtpTransport,
    SnapshotIOError,
    SnapshotStore,
    StandardizationClient,
    TransportError,
    UpstreamError,
    build_report_email,
    report_key,
)
from .config import Settings
from .diff import DiffEngine, DiffError
from .logs import ContextLogger, bind
from .models import DiffReport, NormalizationResult, ScanSnapshot
from .normalization import IssueNormalizer, NormalizationError
from .report import PdfWriter, RenderError, ReportCompositor, ReportPayload

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "latest"
DEFAULT_ACTION = "API_UPDATED"
SUCCESS_MESSAGE = "Validation report generated and delivered"
FAILURE_MESSAGE = "Error processing validation request"
_RESERVED_SEGMENTS = {".", ".."}


class WebhookError(RuntimeError):
    """Raised when a webhook payload cannot be interpreted."""


class ViolationSource(Protocol):
    def fetch_violations(self, owner: str, subject: str, version: str) -> List[Any]: ...


@dataclass(slots=True, frozen=True)
class WebhookEvent:
    owner: str
    subject: str
    version: str = DEFAULT_VERSION
    notify_email: str | None = None
    action: str = DEFAULT_ACTION


@dataclass(slots=True)
class PipelineResult:
    status_code: int
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code == 200


def _first_text(body: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = body.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def parse_webhook_event(event: Any) -> WebhookEvent:
    """Accept a raw body, a JSON string, or an envelope with a ``body`` field."""

    body = event
    if isinstance(event, Mapping) and "body" in event:
        body = event["body"] if event["body"] is not None else event
    if isinstance(body, (str, bytes)):
        try:
            body = json.loads(body)
        except json.JSONDecodeError as exc:
            raise WebhookError("Invalid webhook payload: body is not valid JSON") from exc
    if not isinstance(body, Mapping):
        raise WebhookError("Invalid webhook payload: expected a JSON object")

    owner = _first_text(body, "owner", "organization")
    subject = _first_text(body, "apiName", "api", "name")
    if not owner or not subject:
        raise WebhookError("Invalid webhook payload: missing owner or apiName")

    version = _first_text(body, "version", "apiVersion") or DEFAULT_VERSION
    for value in (owner, subject, version):
        if value in _RESERVED_SEGMENTS:
            raise WebhookError(f"Invalid webhook payload: unusable name {value!r}")

    return WebhookEvent(
        owner=owner,
        subject=subject,
        version=version,
        notify_email=_first_text(body, "notifyEmail", "email") or None,
        action=_first_text(body, "action", "event") or DEFAULT_ACTION,
    )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class ReportPipeline:
    """Fetch, normalize, diff, render, store, and deliver one report."""

    def __init__(
        self,
        *,
        source: ViolationSource,
        snapshot_store: SnapshotStore,
        sink: DocumentSink,
        transport: NotificationTransport | None = None,
        normalizer: IssueNormalizer | None = None,
        diff_engine: DiffEngine | None = None,
        compositor: ReportCompositor | None = None,
        writer: PdfWriter | None = None,
        metrics: MetricsRecorder | None = None,
        sender: str = "noreply@yourdomain.com",
        default_recipient: str | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._source = source
        self._snapshot_store = snapshot_store
        self._sink = sink
        self._transport = transport
        self._normalizer = normalizer or IssueNormalizer()
        self._diff_engine = diff_engine or DiffEngine()
        self._compositor = compositor or ReportCompositor()
        self._writer = writer or PdfWriter(self._compositor.config)
        self._metrics = metrics or MetricsRecorder(enabled=False)
        self._sender = sender
        self._default_recipient = default_recipient
        self._now = now or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReportPipeline":
        transport = None
        if settings.email.smtp_host:
            transport = SmtpTransport(
                settings.email.smtp_host,
                settings.email.smtp_port,
                use_tls=settings.email.use_tls,
                username=settings.email.username,
                password=settings.email.password,
            )

        return cls(
            source=StandardizationClient(
                settings.upstream.base_url,
                api_key=settings.upstream.api_key,
                timeout=settings.upstream.timeout,
            ),
            snapshot_store=LocalSnapshotStore(settings.storage.root),
            sink=LocalDocumentSink(settings.storage.root),
            transport=transport,
            compositor=ReportCompositor(settings.report),
            writer=PdfWriter(settings.report),
            metrics=MetricsRecorder(enabled=settings.metrics_enabled),
            sender=settings.email.from_address,
            default_recipient=settings.email.default_recipient,
        )

    # ------------------------------------------------------------------
    def run(self, event: Any, *, request_id: str = "local") -> PipelineResult:
        """Process ``event``; fatal failures become a 500 result instead of raising."""

        start = time.perf_counter()
        log = bind(logger, request_id=request_id)
        log.info("webhook.received")

        try:
            webhook = parse_webhook_event(event)
            log.info("webhook.parsed", extra={"action": webhook.action})
            api_log = log.bind(owner=webhook.owner, subject=webhook.subject, version=webhook.version)
            return self._process(webhook, api_log, start)
        except (
            WebhookError,
            UpstreamError,
            NormalizationError,
            RenderError,
            SinkIOError,
            TransportError,
        ) as exc:
            log.error("pipeline.failed", extra={"error": str(exc), "error_type": type(exc).__name__})
            return PipelineResult(
                status_code=500,
                body={"message": FAILURE_MESSAGE, "error": str(exc)},
            )

    def _process(self, webhook: WebhookEvent, log: ContextLogger, start: float) -> PipelineResult:
        violations = self._source.fetch_violations(webhook.owner, webhook.subject, webhook.version)
        log.info("violations.fetched", extra={"count": len(violations)})

        result = self._normalizer.normalize(violations)
        summary = result.summary
        log.info(
            "validation.complete",
            extra={
                "score": summary.score,
                "total_issues": summary.total_issues,
                "errors": summary.errors,
                "warnings": summary.warnings,
                "passed": summary.passed,
            },
        )

        diff = self._compute_diff(webhook, result, log)
        self._save_snapshot(webhook, result, log)

        report_start = time.perf_counter()
        generated_at = self._now()
        document = self._compositor.render(
            ReportPayload(
                owner=webhook.owner,
                subject=webhook.subject,
                version=webhook.version,
                result=result,
                diff=diff,
                generated_at=generated_at,
            )
        )
        pdf = self._writer.write(document)
        report_ms = _elapsed_ms(report_start)
        log.info(
            "report.generated",
            extra={"size_bytes": len(pdf), "pages": document.page_count, "duration_ms": report_ms},
        )

        key = report_key(
            webhook.owner,
            webhook.subject,
            webhook.version,
            int(generated_at.timestamp() * 1000),
        )
        report_url = self._sink.store(key, pdf)
        log.info("report.stored", extra={"report_key": key})

        self._notify(webhook, result, diff, report_url, pdf, log)

        total_ms = _elapsed_ms(start)
        self._metrics.record_validation(
            owner=webhook.owner,
            subject=webhook.subject,
            summary=summary,
            diff=diff,
            report_ms=report_ms,
            total_ms=total_ms,
        )
        log.info("pipeline.complete", extra={"total_duration_ms": total_ms})

        return PipelineResult(
            status_code=200,
            body={
                "message": SUCCESS_MESSAGE,
                "reportUrl": report_url,
                "summary": summary.to_dict(),
            },
        )

    def _compute_diff(
        self,
        webhook: WebhookEvent,
        result: NormalizationResult,
        log: ContextLogger,
    ) -> DiffReport | None:
        try:
            previous = self._snapshot_store.get(webhook.owner, webhook.subject)
            diff = self._diff_engine.compare(result, previous)
        except (SnapshotIOError, DiffError) as exc:
            log.warning("diff.failed", extra={"error": str(exc)})
            return None

        log.info(
            "diff.computed",
            extra={
                "resolved_count": len(diff.resolved_issues),
                "new_count": len(diff.new_issues),
                "persisting_count": len(diff.persisting_issues),
                "score_change": diff.score_change,
                "is_first_scan": diff.is_first_scan,
            },
        )
        return diff

    def _save_snapshot(self, webhook: WebhookEvent, result: NormalizationResult, log: ContextLogger) -> None:
        snapshot = ScanSnapshot.from_result(
            webhook.owner,
            webhook.subject,
            webhook.version,
            result,
            scanned_at=self._now(),
        )
        try:
            self._snapshot_store.put(webhook.owner, webhook.subject, snapshot)
        except SnapshotIOError as exc:
            log.warning("scan-history.save-failed", extra={"error": str(exc)})
            return
        log.info("scan-history.saved")

    def _notify(
        self,
        webhook: WebhookEvent,
        result: NormalizationResult,
        diff: DiffReport | None,
        report_url: str,
        pdf: bytes,
        log: ContextLogger,
    ) -> None:
        recipient = webhook.notify_email or self._default_recipient
        if not recipient:
            log.warning("notification.skipped", extra={"reason": "no recipient"})
            return
        if self._transport is None:
            log.warning("notification.skipped", extra={"reason": "no transport configured"})
            return

        message = build_report_email(
            sender=self._sender,
            recipient=recipient,
            owner=webhook.owner,
            subject=webhook.subject,
            version=webhook.version,
            summary=result.summary,
            report_url=report_url,
            pdf=pdf,
            diff=diff,
        )
        self._transport.send(message)
        log.info("email.sent", extra={"recipient": recipient})


__all__ = [
    "PipelineResult",
    "ReportPipeline",
    "ViolationSource",
    "WebhookError",
    "WebhookEvent",
    "parse_webhook_event",
]
