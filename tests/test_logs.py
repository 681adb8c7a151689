from __future__ import annotations

import io
import json
import logging

import pytest

from lint_report_service.logs import ContextLogger, bind, configure_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger("lint_report_service.tests")
    yield logger
    package = logging.getLogger("lint_report_service")
    for handler in list(package.handlers):
        package.removeHandler(handler)
    package.setLevel(logging.NOTSET)


def test_json_output_includes_context_and_extras(package_logger: logging.Logger) -> None:
    stream = io.StringIO()
    configure_logging("INFO", json_output=True, stream=stream)

    log = bind(package_logger, request_id="req-1", owner="acme")
    log.info("diff.computed", extra={"score_change": 4})

    entry = json.loads(stream.getvalue().strip())
    assert entry["event"] == "diff.computed"
    assert entry["level"] == "INFO"
    assert entry["request_id"] == "req-1"
    assert entry["owner"] == "acme"
    assert entry["score_change"] == 4
    assert "timestamp" in entry


def test_readable_output(package_logger: logging.Logger) -> None:
    stream = io.StringIO()
    configure_logging("DEBUG", json_output=False, stream=stream)

    package_logger.warning("scan-history.save-failed", extra={"error": "disk full"})

    assert stream.getvalue().strip() == '[WARNING] scan-history.save-failed {"error": "disk full"}'


def test_level_filters_records(package_logger: logging.Logger) -> None:
    stream = io.StringIO()
    configure_logging("WARNING", stream=stream)

    package_logger.info("ignored")

    assert stream.getvalue() == ""


def test_reconfiguring_replaces_handler(package_logger: logging.Logger) -> None:
    first = io.StringIO()
    second = io.StringIO()
    configure_logging("INFO", stream=first)
    configure_logging("INFO", stream=second)

    package_logger.info("once")

    assert first.getvalue() == ""
    assert second.getvalue().strip() == "[INFO] once"


def test_child_logger_extends_context(package_logger: logging.Logger) -> None:
    parent = bind(package_logger, request_id="r")
    child = parent.bind(subject="petstore")

    assert isinstance(child, ContextLogger)
    assert child.context == {"request_id": "r", "subject": "petstore"}
    assert parent.context == {"request_id": "r"}
    assert bind(parent, version="1").context == {"request_id": "r", "version": "1"}
