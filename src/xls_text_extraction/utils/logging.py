"""Structured logging utilities for xls text extraction.

This module provides:
- Request ID and per-operation context carried in contextvars, so callers can
  correlate our log lines with their ingestion pipeline
- ``key=value`` structured messages on top of the standard logging module
- Performance metrics for each extraction call

The library never installs handlers. It only sets the level of its own
package logger (see ``apply_log_level``); output goes wherever the embedding
application routes it.

Usage:
    from xls_text_extraction.utils.logging import (
        get_logger,
        set_request_id,
        LogContext,
    )

    logger = get_logger(__name__)

    set_request_id("abc-123")

    with LogContext(operation="text"):
        logger.info("Extracting workbook")
        # -> "Extracting workbook | request_id=abc-123, operation=text"
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

PACKAGE_LOGGER_NAME = "xls_text_extraction"

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
_extra_context_var: ContextVar[dict[str, Any] | None] = ContextVar(
    "extra_context", default=None
)


def get_request_id() -> str | None:
    """Get the current request ID from context.

    Returns:
        The current request ID or None if not set.
    """
    return _request_id_var.get()


def set_request_id(request_id: str | None) -> None:
    """Set the request ID in context.

    Args:
        request_id: The request ID to set, or None to clear.
    """
    _request_id_var.set(request_id)


def get_extra_context() -> dict[str, Any]:
    ctx = _extra_context_var.get()
    return ctx if ctx is not None else {}


def set_extra_context(context: dict[str, Any]) -> None:
    _extra_context_var.set(context)


def apply_log_level(level: int) -> None:
    """Set the level of the package logger, leaving the root logger alone."""
    logging.getLogger(PACKAGE_LOGGER_NAME).setLevel(level)


@dataclass
class PerformanceMetrics:
    """Counters for one extraction call.

    Attributes:
        operation: Name of the operation being measured.
        start_time: When the operation started.
        end_time: When the operation ended.
        duration_seconds: Duration in seconds.
        sheets_processed: Number of sheets visited.
        rows_processed: Number of present rows visited.
        cells_emitted: Number of cell values emitted.
        bytes_written: Number of bytes written to the sink.
        truncated: Whether the output was cut short by the byte budget.
        custom_metrics: Additional custom metrics.
    """

    operation: str
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None
    duration_seconds: float = 0.0
    sheets_processed: int = 0
    rows_processed: int = 0
    cells_emitted: int = 0
    bytes_written: int = 0
    truncated: bool = False
    custom_metrics: dict[str, Any] = field(default_factory=dict)

    def finish(self) -> None:
        self.end_time = datetime.now(UTC)
        self.duration_seconds = (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging, leaving out zero counters."""
        result: dict[str, Any] = {
            "operation": self.operation,
            "duration_seconds": self.duration_seconds,
        }
        counters = {
            "sheets_processed": self.sheets_processed,
            "rows_processed": self.rows_processed,
            "cells_emitted": self.cells_emitted,
            "bytes_written": self.bytes_written,
        }
        result.update({name: value for name, value in counters.items() if value})
        if self.truncated:
            result["truncated"] = True
        if self.custom_metrics:
            result["custom_metrics"] = self.custom_metrics
        return result


class StructuredLogger:
    """Logger that renders context and keyword data as ``key=value`` pairs.

    The request ID and any ``LogContext`` values come first, followed by the
    keyword arguments of the call. A keyword argument wins over a context
    value of the same name.
    """

    def __init__(self, name: str) -> None:
        self._logger = logging.getLogger(name)
        self._name = name

    @property
    def logger(self) -> logging.Logger:
        """Access the underlying Python logger."""
        return self._logger

    def _build_message(self, message: str, **kwargs: Any) -> str:
        fields: dict[str, Any] = {}
        request_id = get_request_id()
        if request_id:
            fields["request_id"] = request_id
        fields.update(get_extra_context())
        fields.update(kwargs)

        if not fields:
            return message

        parts = [f"{k}={v}" for k, v in fields.items()]
        return f"{message} | {', '.join(parts)}"

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(self._build_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(self._build_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(self._build_message(message, **kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log an error message.

        Args:
            message: Log message.
            exc_info: Whether to include exception info.
            **kwargs: Additional structured data.
        """
        self._logger.error(self._build_message(message, **kwargs), exc_info=exc_info)

    def log_performance(self, metrics: PerformanceMetrics) -> None:
        """Log performance metrics at DEBUG level."""
        self.debug(f"Performance: {metrics.operation}", **metrics.to_dict())


class LogContext:
    """Context manager that adds fields to every log line inside it.

    A ``request_id`` keyword sets the request ID instead of an extra field.
    Both are restored on exit.

    Usage:
        with LogContext(operation="csv", sheet_index=2):
            logger.info("Rendering sheet")
    """

    def __init__(self, **kwargs: Any) -> None:
        self._new_context = kwargs
        self._old_context: dict[str, Any] = {}
        self._old_request_id: str | None = None

    def __enter__(self) -> "LogContext":
        self._old_context = get_extra_context().copy()
        self._old_request_id = get_request_id()

        new_context = dict(self._new_context)
        request_id = new_context.pop("request_id", None)
        if request_id is not None:
            set_request_id(request_id)

        merged = self._old_context.copy()
        merged.update(new_context)
        set_extra_context(merged)

        return self

    def __exit__(self, *args: Any) -> None:
        set_extra_context(self._old_context)
        set_request_id(self._old_request_id)


@contextmanager
def timed_operation(
    logger: StructuredLogger,
    operation: str,
) -> Generator[PerformanceMetrics, None, None]:
    """Time an operation and log its metrics when it ends, even on error.

    Usage:
        with timed_operation(logger, "cells") as metrics:
            metrics.cells_emitted = 42

    Args:
        logger: Logger to use for output.
        operation: Name of the operation.

    Yields:
        PerformanceMetrics instance for tracking.
    """
    metrics = PerformanceMetrics(operation=operation)
    try:
        yield metrics
    finally:
        metrics.finish()
        logger.log_performance(metrics)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for a module.

    Example:
        logger = get_logger(__name__)
        logger.info("Opened workbook", sheets=3)
    """
    return StructuredLogger(name)
