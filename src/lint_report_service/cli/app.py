"""Command-line interface for normalizing, diffing, and rendering lint reports."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Sequence

from ..adapters import StandardizationClient, UpstreamError
from ..config import Settings, SettingsError, get_settings, load_settings
from ..diff import DiffEngine, DiffError
from ..logs import configure_logging
from ..models import DiffReport, Issue, NormalizationResult
from ..normalization import IssueNormalizer, NormalizationError
from ..report import PdfWriter, RenderError, ReportCompositor, ReportPayload
from ..service import ReportPipeline


class InputFileError(RuntimeError):
    """Raised when a JSON input file cannot be loaded."""


def render_table(issues: Sequence[Issue]) -> str:
    """Render issues as a simple text table for terminal output."""

    if not issues:
        return "No issues found."

    headers = ("Severity", "Code", "Category", "Location", "Message")
    rows = [headers]
    for issue in issues:
        rows.append(
            (
                issue.severity.value,
                issue.code,
                issue.category.value,
                issue.location.describe() or "-",
                issue.message,
            )
        )

    widths = [max(len(str(row[idx])) for row in rows) for idx in range(len(headers))]

    def format_row(values: tuple[str, ...]) -> str:
        return "  ".join(value.ljust(width) for value, width in zip(values, widths, strict=True)).rstrip()

    lines = [format_row(headers)]
    lines.append("  ".join("=" * width for width in widths))
    for row in rows[1:]:
        lines.append(format_row(row))
    return "\n".join(lines)


def render_summary(result: NormalizationResult) -> str:
    summary = result.summary
    status = "PASSED" if summary.passed else "FAILED"
    return (
        f"Score: {summary.score}/100 ({status})  "
        f"errors={summary.errors} warnings={summary.warnings} "
        f"info={summary.info} hints={summary.hints}"
    )


def render_diff(diff: DiffReport) -> str:
    if not diff.has_baseline:
        return "First scan: no previous snapshot to compare against."

    previous = "N/A" if diff.previous_score is None else str(diff.previous_score)
    change = f"+{diff.score_change}" if diff.score_change > 0 else str(diff.score_change)
    lines = [
        f"Compared with version {diff.previous_version or 'unknown'}",
        f"Score: {previous} -> {diff.current_score} ({change})",
        f"Persisting issues: {len(diff.persisting_issues)}",
    ]
    for title, issues in (("Resolved", diff.resolved_issues), ("New", diff.new_issues)):
        lines.append("")
        lines.append(f"{title} issues ({len(issues)}):")
        lines.extend(f"  [{issue.severity.value}] {issue.code} {issue.path}".rstrip() for issue in issues)
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser."""

    parser = argparse.ArgumentParser(
        prog="api-lint-report",
        description="Turn API lint violations into scored, diffed PDF reports",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Log level for local commands (the run command uses configured settings).",
    )
    subparsers = parser.add_subparsers(dest="command")

    normalize_parser = subparsers.add_parser(
        "normalize", help="Normalize raw violations and print canonical issues."
    )
    normalize_parser.add_argument("violations", type=Path, help="JSON file with raw violations.")
    normalize_parser.add_argument("--format", choices=["table", "json"], default="table")

    diff_parser = subparsers.add_parser(
        "diff", help="Compare raw violations against a stored scan snapshot."
    )
    diff_parser.add_argument("violations", type=Path, help="JSON file with raw violations.")
    diff_parser.add_argument(
        "--previous",
        type=Path,
        required=True,
        help="Snapshot JSON written by a previous run.",
    )
    diff_parser.add_argument("--format", choices=["table", "json"], default="table")

    render_parser = subparsers.add_parser("render", help="Render a PDF report from raw violations.")
    render_parser.add_argument("violations", type=Path, help="JSON file with raw violations.")
    render_parser.add_argument("--output", type=Path, required=True, help="Destination PDF path.")
    render_parser.add_argument(
        "--previous",
        type=Path,
        default=None,
        help="Snapshot JSON to include a changes-since-last-scan section.",
    )
    render_parser.add_argument("--subject", default="local-api", help="API name shown in the report.")
    render_parser.add_argument("--owner", default="local", help="API owner shown in the report.")
    render_parser.add_argument("--version", default="1.0.0", help="API version shown in the report.")
    render_parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="YAML settings file providing report branding.",
    )

    run_parser = subparsers.add_parser(
        "run", help="Run the full pipeline against the upstream registry."
    )
    run_parser.add_argument("--owner", required=True)
    run_parser.add_argument("--subject", required=True, help="API name in the registry.")
    run_parser.add_argument("--version", default="latest")
    run_parser.add_argument("--notify-email", default=None)
    run_parser.add_argument("--settings", type=Path, default=None, help="YAML settings file.")

    spec_parser = subparsers.add_parser(
        "fetch-spec", help="Print the API definition stored in the upstream registry."
    )
    spec_parser.add_argument("--owner", required=True)
    spec_parser.add_argument("--subject", required=True, help="API name in the registry.")
    spec_parser.add_argument("--version", default="latest")
    spec_parser.add_argument("--settings", type=Path, default=None, help="YAML settings file.")

    return parser


def _settings(path: Path | None) -> Settings:
    """Settings from ``path`` when given, otherwise the process-wide cached settings."""

    if path is not None:
        return load_settings(path)
    return get_settings()


def _load_json(path: Path) -> Any:
    if not path.exists():
        raise InputFileError(f"File not found: {path}")

    with path.open("r", encoding="utf-8") as handle:
        try:
            return json.load(handle)
        except json.JSONDecodeError as exc:
            raise InputFileError(f"Invalid JSON in {path}") from exc


def _normalize_file(path: Path) -> NormalizationResult:
    return IssueNormalizer().normalize_payload(_load_json(path))


def _handle_normalize(args: argparse.Namespace) -> int:
    try:
        result = _normalize_file(args.violations)
    except (InputFileError, NormalizationError) as exc:
        print(f"Error: {exc}")
        return 2

    if args.format == "json":
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(render_table(result.issues))
        print()
        print(render_summary(result))
    return 0 if result.summary.passed else 1


def _handle_diff(args: argparse.Namespace) -> int:
    try:
        result = _normalize_file(args.violations)
        previous = _load_json(args.previous)
        diff = DiffEngine().compare(result, previous)
    except (InputFileError, NormalizationError, DiffError) as exc:
        print(f"Error: {exc}")
        return 2

    if args.format == "json":
        print(json.dumps(diff.to_dict(), indent=2))
    else:
        print(render_diff(diff))
    return 0


def _handle_render(args: argparse.Namespace) -> int:
    try:
        settings = _settings(args.settings)
        result = _normalize_file(args.violations)
        diff = None
        if args.previous is not None:
            diff = DiffEngine().compare(result, _load_json(args.previous))

        compositor = ReportCompositor(settings.report)
        document = compositor.render(
            ReportPayload(
                owner=args.owner,
                subject=args.subject,
                version=args.version,
                result=result,
                diff=diff,
            )
        )
        pdf = PdfWriter(settings.report).write(document)
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_bytes(pdf)
    except (SettingsError, InputFileError, NormalizationError, DiffError, RenderError, OSError) as exc:
        print(f"Error: {exc}")
        return 2

    print(f"Report written to {args.output} ({document.page_count} pages, {len(pdf)} bytes)")
    print(render_summary(result))
    return 0


def _handle_run(args: argparse.Namespace) -> int:
    try:
        settings = _settings(args.settings)
    except SettingsError as exc:
        print(f"Error: {exc}")
        return 2

    configure_logging(settings.log_level, settings.json_logs)
    pipeline = ReportPipeline.from_settings(settings)
    outcome = pipeline.run(
        {
            "owner": args.owner,
            "apiName": args.subject,
            "version": args.version,
            "notifyEmail": args.notify_email,
        }
    )
    print(json.dumps(outcome.body, indent=2))
    return 0 if outcome.ok else 1


def _handle_fetch_spec(args: argparse.Namespace) -> int:
    try:
        settings = _settings(args.settings)
        client = StandardizationClient(
            settings.upstream.base_url,
            api_key=settings.upstream.api_key,
            timeout=settings.upstream.timeout,
        )
        definition = client.fetch_api_spec(args.owner, args.subject, args.version)
    except (SettingsError, UpstreamError) as exc:
        print(f"Error: {exc}")
        return 2

    print(json.dumps(definition, indent=2))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point used by tests and the ``python -m`` invocation."""

    parser = build_parser()
    args = parser.parse_args(argv)

    handlers = {
        "normalize": _handle_normalize,
        "diff": _handle_diff,
        "render": _handle_render,
        "run": _handle_run,
        "fetch-spec": _handle_fetch_spec,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 0

    if args.command != "run":
        configure_logging(args.log_level)
    return handler(args)


def run() -> None:  # pragma: no cover - thin wrapper for module execution
    """Execute the CLI and exit with the produced status code."""

    raise SystemExit(main())


if __name__ == "__main__":  # pragma: no cover - module execution guard
    run()
