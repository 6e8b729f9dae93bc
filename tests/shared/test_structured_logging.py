"""Tests for the structured logging helpers."""

from __future__ import annotations

import json
import logging

from rich.logging import RichHandler

from steamdb_companion.shared.errors import ErrorCode, ErrorContext, OriginError
from steamdb_companion.shared.logging import (
    StructuredFormatter,
    log_api_call,
    log_operation_error,
    log_operation_success,
    setup_structured_logger,
)

logger = logging.getLogger("tests.structured_logging")


def test_operation_error_carries_context(caplog) -> None:
    error = OriginError(
        ErrorCode.ORIGIN_TIMEOUT,
        "timed out",
        ErrorContext(operation="origin_request", installation_id="secret"),
    )

    with caplog.at_level(logging.WARNING, logger=logger.name):
        log_operation_error(logger, error, additional_context={"remote": "steamdb"}, level=logging.WARNING)

    record = caplog.records[0]
    assert record.levelno == logging.WARNING
    assert record.error_code == "ORIGIN_TIMEOUT"
    assert record.operation == "origin_request"
    assert record.context == {"operation": "origin_request", "additional_data": {}, "remote": "steamdb"}


def test_operation_success_is_debug(caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger=logger.name):
        log_operation_success(logger, "remote_fetch", 12.5, context={"cache_key": "route:home"})

    record = caplog.records[0]
    assert record.levelno == logging.DEBUG
    assert record.duration_ms == 12.5
    assert record.context == {"cache_key": "route:home"}


def test_api_call_failure_status_is_warning(caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger=logger.name):
        log_api_call(logger, "https://steamdb.info/", status_code=200)
        log_api_call(logger, "https://steamdb.info/", status_code=503)

    assert [r.levelno for r in caplog.records] == [logging.DEBUG, logging.WARNING]
    assert caplog.records[1].getMessage() == "GET https://steamdb.info/ failed with status 503"


def test_structured_formatter_emits_json() -> None:
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.operation = "fetch"

    entry = json.loads(StructuredFormatter().format(record))

    assert entry["message"] == "hello world"
    assert entry["level"] == "INFO"
    assert entry["operation"] == "fetch"


def test_setup_replaces_handlers(tmp_path) -> None:
    log_file = tmp_path / "companion.log"

    configured = setup_structured_logger("tests.setup", "debug", str(log_file), use_rich_console=False)
    configured = setup_structured_logger("tests.setup", "INFO", use_rich_console=True)

    assert configured.level == logging.INFO
    assert configured.propagate is False
    assert len(configured.handlers) == 1
    assert isinstance(configured.handlers[0], RichHandler)
