"""Source format detection for legacy spreadsheets.

This module provides the OLE2 signature sniff used to recognise legacy binary
spreadsheets, plus a detector that combines the sniff with libmagic content
analysis and the file extension to classify a source.
"""

from pathlib import Path

import magic

from xls_text_extraction.models import FormatFamily, FormatInfo
from xls_text_extraction.utils.exceptions import UnsupportedFormatError
from xls_text_extraction.utils.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    "FormatDetector",
    "UnsupportedFormatError",
    "XLS_SIGNATURE",
    "EXTENSION_TO_MIME",
    "MIME_TO_FORMAT_FAMILY",
    "is_file_xls",
]

# OLE2 compound file header shared by every legacy Office binary format
XLS_SIGNATURE = bytes([0xD0, 0xCF, 0x11, 0xE0, 0xA1, 0xB1, 0x1A, 0xE1])

XLS_MIME = "application/vnd.ms-excel"

EXTENSION_TO_MIME: dict[str, str] = {
    # Legacy binary spreadsheets
    ".xls": XLS_MIME,
    ".xlt": XLS_MIME,
    ".xla": XLS_MIME,
    # Other OLE2 Office documents
    ".doc": "application/msword",
    ".ppt": "application/vnd.ms-powerpoint",
    ".msg": "application/vnd.ms-outlook",
    # Formats that are often mistaken for .xls
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".csv": "text/csv",
}

MIME_TO_EXTENSION: dict[str, str] = {
    XLS_MIME: ".xls",
    "application/msword": ".doc",
    "application/vnd.ms-powerpoint": ".ppt",
    "application/vnd.ms-outlook": ".msg",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": ".xlsx",
    "text/csv": ".csv",
}

MIME_TO_FORMAT_FAMILY: dict[str, FormatFamily] = {
    XLS_MIME: FormatFamily.LEGACY_SPREADSHEET,
    "application/msword": FormatFamily.OLE_DOCUMENT,
    "application/vnd.ms-powerpoint": FormatFamily.OLE_DOCUMENT,
    "application/vnd.ms-outlook": FormatFamily.OLE_DOCUMENT,
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": (
        FormatFamily.OOXML_SPREADSHEET
    ),
    "text/csv": FormatFamily.DELIMITED_TEXT,
}

# libmagic answers for OLE2 content it cannot attribute to one application
GENERIC_OLE_MIME_TYPES: set[str] = {
    "application/x-ole-storage",
    "application/CDFV2",
    "application/vnd.ms-office",
}


def is_file_xls(data: bytes) -> bool:
    """Check whether ``data`` starts with the OLE2 compound file signature.

    XLS has a signature of D0 CF 11 E0 A1 B1 1A E1. Buffers shorter than the
    signature never match.
    """
    return bytes(data[: len(XLS_SIGNATURE)]) == XLS_SIGNATURE


class FormatDetector:
    """Detects and classifies source formats.

    The OLE2 signature decides whether content is a compound document at all;
    libmagic and the file extension then tell spreadsheets apart from other
    Office binaries. Without the signature, content is never classified as a
    legacy spreadsheet regardless of its extension.
    """

    def __init__(self) -> None:
        self._magic = magic.Magic(mime=True)

    def detect_from_path(self, file_path: str | Path) -> FormatInfo:
        """Detect format from a file path.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        return self.detect_from_content(path.read_bytes(), filename=path.name)

    def detect_from_content(
        self,
        content: bytes,
        filename: str | None = None,
    ) -> FormatInfo:
        """Detect format from file content bytes.

        Args:
            content: File content as bytes.
            filename: Optional filename for extension-based fallback.

        Returns:
            FormatInfo with detected format information.
        """
        original_extension = None
        if filename:
            ext = Path(filename).suffix.lower()
            original_extension = ext if ext else None

        has_signature = is_file_xls(content)
        detected_mime = self._detect_mime_from_content(content)
        mime_from_extension = EXTENSION_TO_MIME.get(original_extension or "")

        detected_from_content = False
        if detected_mime in MIME_TO_FORMAT_FAMILY:
            final_mime = detected_mime
            detected_from_content = True
        elif has_signature:
            # Generic OLE2 answer: trust the extension unless it names a
            # non-OLE format, in which case the signature wins.
            family = MIME_TO_FORMAT_FAMILY.get(mime_from_extension or "")
            if family in (FormatFamily.LEGACY_SPREADSHEET, FormatFamily.OLE_DOCUMENT):
                final_mime = mime_from_extension or XLS_MIME
            else:
                final_mime = XLS_MIME
            detected_from_content = detected_mime in GENERIC_OLE_MIME_TYPES
        elif mime_from_extension and mime_from_extension != XLS_MIME:
            final_mime = mime_from_extension
        else:
            final_mime = detected_mime or "application/octet-stream"

        format_family = MIME_TO_FORMAT_FAMILY.get(final_mime, FormatFamily.UNKNOWN)
        if format_family == FormatFamily.LEGACY_SPREADSHEET and not has_signature:
            format_family = FormatFamily.UNKNOWN

        extension = MIME_TO_EXTENSION.get(final_mime, original_extension or "")
        original_ext_differs = None
        if original_extension and original_extension != extension:
            original_ext_differs = original_extension
            logger.warning(
                "File extension does not match detected format",
                extension=original_extension,
                detected_mime=final_mime,
            )

        return FormatInfo(
            mime_type=final_mime,
            extension=extension,
            format_family=format_family,
            has_ole_signature=has_signature,
            detected_from_content=detected_from_content,
            original_extension=original_ext_differs,
        )

    def require_xls(self, content: bytes, filename: str | None = None) -> FormatInfo:
        """Detect format and insist on a legacy binary spreadsheet.

        Raises:
            UnsupportedFormatError: If the content is anything else.
        """
        info = self.detect_from_content(content, filename=filename)
        if not info.is_legacy_spreadsheet:
            raise UnsupportedFormatError(
                f"Not a legacy binary spreadsheet: {info.mime_type}",
                detected_mime=info.mime_type,
                file_path=filename,
            )
        return info

    def _detect_mime_from_content(self, content: bytes) -> str | None:
        """Detect MIME type from file content using libmagic.

        Returns:
            Detected MIME type or None if detection fails.
        """
        if not content:
            return None

        try:
            return str(self._magic.from_buffer(content))
        except Exception as e:
            logger.warning(
                "Magic detection failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    @staticmethod
    def get_supported_extensions() -> list[str]:
        """List the extensions that map to a legacy spreadsheet."""
        return sorted(
            ext for ext, mime in EXTENSION_TO_MIME.items() if mime == XLS_MIME
        )
