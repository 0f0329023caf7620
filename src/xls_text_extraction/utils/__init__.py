"""Utilities package for xls text extraction.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from xls_text_extraction.utils.exceptions import (
    ErrorCode,
    ExtractionError,
    FileError,
    FileTooLargeError,
    SheetNotFoundError,
    SinkWriteError,
    SourceNotFoundError,
    UnsupportedFormatError,
    XLSExtractionError,
)
from xls_text_extraction.utils.logging import (
    LogContext,
    StructuredLogger,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Exceptions
    "ErrorCode",
    "ExtractionError",
    "FileError",
    "FileTooLargeError",
    "SheetNotFoundError",
    "SinkWriteError",
    "SourceNotFoundError",
    "UnsupportedFormatError",
    "XLSExtractionError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
