"""Tests for the structured logging utilities."""

import logging
import time
from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest

from xls_text_extraction.utils.logging import (
    PACKAGE_LOGGER_NAME,
    LogContext,
    PerformanceMetrics,
    StructuredLogger,
    apply_log_level,
    get_extra_context,
    get_logger,
    get_request_id,
    set_extra_context,
    set_request_id,
    timed_operation,
)


@pytest.fixture(autouse=True)
def reset_log_context() -> Iterator[None]:
    set_request_id(None)
    set_extra_context({})
    yield
    set_request_id(None)
    set_extra_context({})


class TestContextVariables:
    """Tests for context variable management."""

    def test_request_id_default_none(self) -> None:
        assert get_request_id() is None

    def test_set_and_get_request_id(self) -> None:
        set_request_id("req-123")
        assert get_request_id() == "req-123"

    def test_extra_context_default_empty(self) -> None:
        assert get_extra_context() == {}

    def test_set_and_get_extra_context(self) -> None:
        ctx = {"document": "book.xls", "sheet": 2}
        set_extra_context(ctx)
        assert get_extra_context() == ctx


class TestPerformanceMetrics:
    """Tests for PerformanceMetrics class."""

    def test_initialization(self) -> None:
        metrics = PerformanceMetrics(operation="text")
        assert metrics.operation == "text"
        assert metrics.duration_seconds == 0.0
        assert metrics.sheets_processed == 0
        assert metrics.rows_processed == 0
        assert metrics.cells_emitted == 0
        assert metrics.bytes_written == 0
        assert metrics.truncated is False
        assert metrics.custom_metrics == {}

    def test_finish_calculates_duration(self) -> None:
        metrics = PerformanceMetrics(operation="text")
        time.sleep(0.01)
        metrics.finish()
        assert metrics.duration_seconds > 0
        assert metrics.end_time is not None

    def test_to_dict_with_all_fields(self) -> None:
        metrics = PerformanceMetrics(operation="text")
        metrics.duration_seconds = 2.0
        metrics.sheets_processed = 2
        metrics.rows_processed = 40
        metrics.cells_emitted = 120
        metrics.bytes_written = 4096
        metrics.truncated = True
        metrics.custom_metrics = {"encoding": "cp1252"}

        result = metrics.to_dict()
        assert result["sheets_processed"] == 2
        assert result["rows_processed"] == 40
        assert result["cells_emitted"] == 120
        assert result["bytes_written"] == 4096
        assert result["truncated"] is True
        assert result["custom_metrics"]["encoding"] == "cp1252"

    def test_to_dict_excludes_zero_values(self) -> None:
        metrics = PerformanceMetrics(operation="csv")
        metrics.duration_seconds = 1.0
        result = metrics.to_dict()
        assert result == {"operation": "csv", "duration_seconds": 1.0}


class TestStructuredLogger:
    """Tests for StructuredLogger class."""

    def setup_method(self) -> None:
        self.logger = get_logger("test_logger")

    def test_get_logger_returns_structured_logger(self) -> None:
        assert isinstance(get_logger(__name__), StructuredLogger)

    def test_logger_property(self) -> None:
        assert isinstance(self.logger.logger, logging.Logger)

    def test_build_message_without_fields(self) -> None:
        assert self.logger._build_message("Test message") == "Test message"

    def test_build_message_with_kwargs(self) -> None:
        msg = self.logger._build_message("Opened workbook", sheets=3, biff=80)
        assert msg == "Opened workbook | sheets=3, biff=80"

    def test_build_message_includes_context_first(self) -> None:
        set_request_id("r1")
        with LogContext(operation="csv"):
            msg = self.logger._build_message("Rendering", rows=4)

        assert msg == "Rendering | request_id=r1, operation=csv, rows=4"

    def test_kwargs_override_context(self) -> None:
        with LogContext(operation="csv"):
            msg = self.logger._build_message("Done", operation="cells")

        assert msg == "Done | operation=cells"

    @patch.object(logging.Logger, "info")
    def test_info_logging(self, mock_info: MagicMock) -> None:
        self.logger.info("Test info", status="ok")
        mock_info.assert_called_once()
        assert "status=ok" in mock_info.call_args[0][0]

    @patch.object(logging.Logger, "warning")
    def test_warning_logging(self, mock_warning: MagicMock) -> None:
        self.logger.warning("Test warning")
        mock_warning.assert_called_once()

    @patch.object(logging.Logger, "error")
    def test_error_logging(self, mock_error: MagicMock) -> None:
        self.logger.error("Test error", exc_info=True)
        mock_error.assert_called_once()
        assert mock_error.call_args.kwargs["exc_info"] is True

    @patch.object(logging.Logger, "debug")
    def test_log_performance(self, mock_debug: MagicMock) -> None:
        metrics = PerformanceMetrics(operation="cells")
        metrics.cells_emitted = 7

        self.logger.log_performance(metrics)

        message = mock_debug.call_args[0][0]
        assert message.startswith("Performance: cells")
        assert "cells_emitted=7" in message


class TestLogContext:
    def test_adds_and_restores_context(self) -> None:
        with LogContext(document="book.xls"):
            assert get_extra_context() == {"document": "book.xls"}
            with LogContext(operation="csv"):
                assert get_extra_context() == {
                    "document": "book.xls",
                    "operation": "csv",
                }
            assert get_extra_context() == {"document": "book.xls"}
        assert get_extra_context() == {}

    def test_request_id_handled_separately(self) -> None:
        context = LogContext(request_id="req-9", document="a.xls")
        with context:
            assert get_request_id() == "req-9"
            assert "request_id" not in get_extra_context()
        assert get_request_id() is None

        with context:
            assert get_request_id() == "req-9"

    def test_restores_on_exception(self) -> None:
        with pytest.raises(RuntimeError):
            with LogContext(operation="text"):
                raise RuntimeError("stop")

        assert get_extra_context() == {}


class TestTimedOperation:
    @patch.object(StructuredLogger, "log_performance")
    def test_logs_metrics_even_on_error(self, mock_log: MagicMock) -> None:
        logger = get_logger("timed")
        with pytest.raises(RuntimeError):
            with timed_operation(logger, "text") as metrics:
                metrics.bytes_written = 10
                raise RuntimeError("stop")

        logged = mock_log.call_args[0][0]
        assert logged.operation == "text"
        assert logged.bytes_written == 10
        assert logged.end_time is not None


class TestApplyLogLevel:
    def test_sets_package_logger_only(self) -> None:
        package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
        root = logging.getLogger()
        saved_package_level = package_logger.level
        saved_root_level = root.level
        saved_root_handlers = root.handlers[:]
        try:
            apply_log_level(logging.ERROR)

            assert package_logger.level == logging.ERROR
            assert root.level == saved_root_level
            assert root.handlers == saved_root_handlers
            assert not logging.getLogger(
                "xls_text_extraction.services.sheet_converter"
            ).isEnabledFor(logging.WARNING)
        finally:
            package_logger.setLevel(saved_package_level)
