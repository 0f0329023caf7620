"""Services for xls text extraction."""

from xls_text_extraction.services.format_detector import (
    FormatDetector,
    UnsupportedFormatError,
    is_file_xls,
)
from xls_text_extraction.services.sheet_converter import (
    BoundedWriter,
    SheetConverter,
    clean_cell,
    xls_to_cells,
    xls_to_csv,
    xls_to_text,
)
from xls_text_extraction.services.xlrd_reader import XlrdWorkbookReader

__all__ = [
    "BoundedWriter",
    "FormatDetector",
    "SheetConverter",
    "UnsupportedFormatError",
    "XlrdWorkbookReader",
    "clean_cell",
    "is_file_xls",
    "xls_to_cells",
    "xls_to_csv",
    "xls_to_text",
]
