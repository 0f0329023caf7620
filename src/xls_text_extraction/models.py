"""Pydantic models describing detected source formats."""

from enum import Enum

from pydantic import BaseModel, Field


class FormatFamily(str, Enum):
    """Source format family classification."""

    LEGACY_SPREADSHEET = "legacy_spreadsheet"
    OOXML_SPREADSHEET = "ooxml_spreadsheet"
    OLE_DOCUMENT = "ole_document"
    DELIMITED_TEXT = "delimited_text"
    UNKNOWN = "unknown"


class FormatInfo(BaseModel):
    """Format detection result."""

    mime_type: str = Field(
        ..., description="MIME type of the source (e.g., 'application/vnd.ms-excel')"
    )
    extension: str = Field(
        ..., description="Canonical file extension including the dot (e.g., '.xls')"
    )
    format_family: FormatFamily = Field(
        ..., description="Source format family classification"
    )
    has_ole_signature: bool = Field(
        default=False,
        description="Whether the content starts with the OLE2 compound file signature",
    )
    detected_from_content: bool = Field(
        default=False,
        description="Whether format was detected from file content (magic bytes)",
    )
    original_extension: str | None = Field(
        default=None,
        description="Original file extension if different from detected format",
    )

    @property
    def is_legacy_spreadsheet(self) -> bool:
        return self.format_family == FormatFamily.LEGACY_SPREADSHEET
