"""Best-effort operational metrics for validation runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Protocol, Sequence, Tuple, runtime_checkable

from ..models import DiffReport, Summary

logger = logging.getLogger(__name__)

NAMESPACE = "SwaggerHubValidation"
BATCH_SIZE = 25

Dimensions = Tuple[Tuple[str, str], ...]


@dataclass(slots=True, frozen=True)
class MetricDatum:
    name: str
    value: float
    unit: str
    dimensions: Dimensions = ()
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "MetricName": self.name,
            "Value": self.value,
            "Unit": self.unit,
            "Dimensions": [{"Name": name, "Value": value} for name, value in self.dimensions],
            "Timestamp": self.timestamp.isoformat(),
        }


@runtime_checkable
class MetricsSink(Protocol):
    def publish(self, namespace: str, batch: Sequence[MetricDatum]) -> None: ...


class LoggingMetricsSink:
    """Emit every batch as one structured log record."""

    def __init__(self, target: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self.target = target or logger
        self.level = level

    def publish(self, namespace: str, batch: Sequence[MetricDatum]) -> None:
        self.target.log(
            self.level,
            "metrics.batch",
            extra={"namespace": namespace, "metrics": [datum.to_dict() for datum in batch]},
        )


class MetricsRecorder:
    """Buffer metric datums for a run and flush them to a sink in batches."""

    def __init__(
        self,
        sink: MetricsSink | None = None,
        *,
        enabled: bool = True,
        namespace: str = NAMESPACE,
        batch_size: int = BATCH_SIZE,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.sink = sink or LoggingMetricsSink()
        self.enabled = enabled
        self.namespace = namespace
        self.batch_size = batch_size
        self._buffer: List[MetricDatum] = []

    @property
    def pending(self) -> List[MetricDatum]:
        return list(self._buffer)

    def add(self, name: str, value: float, unit: str, dimensions: Dimensions = (), timestamp: datetime | None = None) -> None:
        if not self.enabled:
            return
        self._buffer.append(
            MetricDatum(
                name=name,
                value=value,
                unit=unit,
                dimensions=dimensions,
                timestamp=timestamp or datetime.now(timezone.utc),
            )
        )

    def record_validation(
        self,
        *,
        owner: str,
        subject: str,
        summary: Summary,
        diff: DiffReport | None = None,
        report_ms: float | None = None,
        total_ms: float | None = None,
    ) -> int:
        """Buffer and flush the metrics for one run; returns the number of datums sent."""

        if not self.enabled:
            return 0

        timestamp = datetime.now(timezone.utc)
        per_api: Dimensions = (("Owner", owner), ("ApiName", subject))
        overall: Dimensions = (("Service", self.namespace),)
        passed = 1 if summary.passed else 0

        self.add("ValidationScore", summary.score, "None", per_api, timestamp)
        self.add("TotalIssues", summary.total_issues, "Count", per_api, timestamp)
        self.add("ErrorCount", summary.errors, "Count", per_api, timestamp)
        self.add("WarningCount", summary.warnings, "Count", per_api, timestamp)
        self.add("InfoCount", summary.info, "Count", per_api, timestamp)
        self.add("ValidationPassed", passed, "Count", per_api, timestamp)

        self.add("ValidationScore", summary.score, "None", overall, timestamp)
        self.add("TotalIssues", summary.total_issues, "Count", overall, timestamp)
        self.add("ValidationPassed", passed, "Count", overall, timestamp)

        if diff is not None and diff.has_baseline:
            self.add("ScoreChange", diff.score_change, "None", per_api, timestamp)
            self.add("ResolvedIssues", len(diff.resolved_issues), "Count", per_api, timestamp)
            self.add("NewIssues", len(diff.new_issues), "Count", per_api, timestamp)

        if report_ms is not None:
            self.add("ReportGenerationTime", report_ms, "Milliseconds", overall, timestamp)
        if total_ms is not None:
            self.add("PipelineDuration", total_ms, "Milliseconds", overall, timestamp)

        return self.flush()

    def flush(self) -> int:
        """Send buffered datums; a failing batch is logged and dropped."""

        buffer, self._buffer = self._buffer, []
        sent = 0
        for start in range(0, len(buffer), self.batch_size):
            batch = buffer[start : start + self.batch_size]
            try:
                self.sink.publish(self.namespace, batch)
            except Exception as exc:  # noqa: BLE001
                logger.warning("metrics.publish-failed error=%s", exc)
                continue
            sent += len(batch)
        return sent
