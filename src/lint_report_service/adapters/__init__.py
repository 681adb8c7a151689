"""Adapters for the upstream registry, storage, notification, and metrics."""

from .document_sink import DocumentSink, LocalDocumentSink, SinkIOError, report_key
from .metrics import LoggingMetricsSink, MetricDatum, MetricsRecorder, MetricsSink
from .notification import NotificationTransport, SmtpTransport, TransportError, build_report_email
from .snapshot_store import LocalSnapshotStore, SnapshotIOError, SnapshotStore, snapshot_key
from .upstream import StandardizationClient, UpstreamError

__all__ = [
    "DocumentSink",
    "LocalDocumentSink",
    "LocalSnapshotStore",
    "LoggingMetricsSink",
    "MetricDatum",
    "MetricsRecorder",
    "MetricsSink",
    "NotificationTransport",
    "SinkIOError",
    "SmtpTransport",
    "SnapshotIOError",
    "SnapshotStore",
    "StandardizationClient",
    "TransportError",
    "UpstreamError",
    "build_report_email",
    "report_key",
    "snapshot_key",
]
