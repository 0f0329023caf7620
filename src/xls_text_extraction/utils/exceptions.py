"""Centralized exception classes for xls text extraction.

This module provides a hierarchy of custom exceptions with error codes and
structured error details for consistent error handling throughout the library.

Exception Hierarchy:
    XLSExtractionError (base)
    ├── FileError
    │   ├── SourceNotFoundError
    │   ├── FileTooLargeError
    │   └── UnsupportedFormatError
    └── ExtractionError
        ├── SheetNotFoundError
        └── SinkWriteError

Note that a workbook which cannot be opened is not an error: the converter
treats corrupt or unparsable input as "nothing to extract".

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the library.

    Error codes are grouped by category:
    - E1xxx: File/source errors
    - E4xxx: Extraction errors
    - E9xxx: Internal/unexpected errors
    """

    # File errors (E1xxx)
    FILE_NOT_FOUND = "E1001"
    FILE_TOO_LARGE = "E1002"
    UNSUPPORTED_FORMAT = "E1003"
    FILE_READ_ERROR = "E1004"

    # Extraction errors (E4xxx)
    EXTRACTION_FAILED = "E4001"
    SHEET_NOT_FOUND = "E4002"
    SINK_WRITE_FAILED = "E4003"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"


class XLSExtractionError(Exception):
    """Base exception for all xls text extraction errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for structured logging.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# File Errors (E1xxx)
# =============================================================================


class FileError(XLSExtractionError):
    """Base class for source file errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.FILE_READ_ERROR,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with file path information.

        Args:
            message: Error message.
            error_code: Error code.
            file_path: Path to the problematic file.
            details: Additional details.
        """
        details = dict(details or {})
        if file_path:
            details["file_path"] = file_path
        super().__init__(message, error_code, details)
        self.file_path = file_path


class SourceNotFoundError(FileError):
    """Raised when a path source does not exist.

    Note: Not named FileNotFoundError to avoid shadowing the built-in.
    """

    def __init__(
        self,
        file_path: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = message or f"File not found: {file_path}"
        super().__init__(
            message=message,
            error_code=ErrorCode.FILE_NOT_FOUND,
            file_path=file_path,
            details=details,
        )


class FileTooLargeError(FileError):
    """Raised when a source exceeds the configured size limit."""

    def __init__(
        self,
        file_size: int,
        max_size: int,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with size information.

        Args:
            file_size: Actual source size in bytes.
            max_size: Maximum allowed size in bytes.
            file_path: Optional file path.
            details: Additional details.
        """
        details = dict(details or {})
        details["file_size_bytes"] = file_size
        details["max_size_bytes"] = max_size
        message = (
            f"File size ({file_size} bytes) exceeds maximum "
            f"allowed size ({max_size} bytes)"
        )
        super().__init__(
            message=message,
            error_code=ErrorCode.FILE_TOO_LARGE,
            file_path=file_path,
            details=details,
        )
        self.file_size = file_size
        self.max_size = max_size


class UnsupportedFormatError(FileError):
    """Raised when content is not a legacy binary spreadsheet."""

    def __init__(
        self,
        message: str,
        detected_mime: str | None = None,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        if detected_mime:
            details["detected_mime_type"] = detected_mime
        super().__init__(
            message=message,
            error_code=ErrorCode.UNSUPPORTED_FORMAT,
            file_path=file_path,
            details=details,
        )
        self.detected_mime = detected_mime


# =============================================================================
# Extraction Errors (E4xxx)
# =============================================================================


class ExtractionError(XLSExtractionError):
    """Base class for extraction-related errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.EXTRACTION_FAILED,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the operation that failed.

        Args:
            message: Error message.
            error_code: Error code.
            operation: The extraction operation where the error occurred.
            details: Additional details.
        """
        details = dict(details or {})
        if operation:
            details["operation"] = operation
        super().__init__(message, error_code, details)
        self.operation = operation


class SheetNotFoundError(ExtractionError):
    """Raised when a requested sheet index does not exist in the workbook."""

    def __init__(
        self,
        sheet_index: int,
        sheet_count: int | None = None,
        operation: str = "csv",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with sheet information.

        Args:
            sheet_index: The zero-based sheet index that was requested.
            sheet_count: Number of sheets in the workbook, when known.
            operation: Operation that asked for the sheet.
            details: Additional details.
        """
        details = dict(details or {})
        details["sheet_index"] = sheet_index
        if sheet_count is not None:
            details["sheet_count"] = sheet_count
        super().__init__(
            message="sheet doesn't exist",
            error_code=ErrorCode.SHEET_NOT_FOUND,
            operation=operation,
            details=details,
        )
        self.sheet_index = sheet_index
        self.sheet_count = sheet_count


class SinkWriteError(ExtractionError):
    """Raised when writing to the output sink fails mid-extraction.

    ``bytes_written`` holds the number of bytes that reached the sink before
    the failure.
    """

    def __init__(
        self,
        message: str,
        bytes_written: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        details["bytes_written"] = bytes_written
        super().__init__(
            message=message,
            error_code=ErrorCode.SINK_WRITE_FAILED,
            operation="text",
            details=details,
        )
        self.bytes_written = bytes_written

