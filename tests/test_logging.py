"""Tests for the structured logging system (oversight_kernel/logging_config.py)."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from oversight_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    """Parse all JSON log lines from a stream."""
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "oversight_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("addition_created", extra={"amount": 42, "kind": "SUSPENSION"})

        record = _parse_log(stream)
        assert record["amount"] == 42
        assert record["kind"] == "SUSPENSION"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(correlation_id="abc-123", contract_id="c-1")
        get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["contract_id"] == "c-1"

    def test_kernel_exception_fields_extracted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        from oversight_kernel.exceptions import OverlappingSuspensionError

        try:
            raise OverlappingSuspensionError("c-1", "m-9", "2024-02-10", "2024-02-15")
        except OverlappingSuspensionError:
            get_logger("test").warning("operation_failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "OverlappingSuspensionError"
        assert record["exc_code"] == "OVERLAPPING_SUSPENSION"
        assert record["exc_existing_modification_id"] == "m-9"
        assert record["exc_overlap_end"] == "2024-02-15"
        assert "traceback" in record

    def test_plain_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("test").error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "exc_code" not in record

    def test_domain_values_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        uid = uuid4()
        get_logger("test").info(
            "values",
            extra={"contract_id_value": uid, "end": date(2025, 1, 15), "pct": Decimal("12.50")},
        )

        record = _parse_log(stream)
        assert record["contract_id_value"] == str(uid)
        assert record["end"] == "2025-01-15"
        assert record["pct"] == "12.50"

    def test_debug_filtered_at_info(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        assert [r["message"] for r in logs] == ["first", "second"]


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(correlation_id="x", operation="create_addition")
        assert LogContext.get_all() == {"correlation_id": "x", "operation": "create_addition"}

    def test_clear(self):
        LogContext.set(actor_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_restores_previous(self):
        LogContext.set(correlation_id="outer")
        with LogContext.bind(correlation_id="inner", contract_id="c"):
            assert LogContext.get_all() == {"correlation_id": "inner", "contract_id": "c"}
        assert LogContext.get_all() == {"correlation_id": "outer"}

    def test_bind_ignores_none(self):
        with LogContext.bind(contract_id=None, operation="get_contract"):
            assert LogContext.get_all() == {"operation": "get_contract"}
        assert LogContext.get_all() == {}


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)
        # pytest's own capture handlers may sit on the logger as well.
        structured = [
            h
            for h in logging.getLogger("oversight_kernel").handlers
            if isinstance(h.formatter, StructuredFormatter)
        ]
        assert structured == [h1]

    def test_logger_hierarchy(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        get_logger("services.modification").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["logger"] == "oversight_kernel.services.modification"
