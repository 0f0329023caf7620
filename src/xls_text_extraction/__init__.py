"""XLS Text Extraction - text, CSV and cell lists from legacy binary spreadsheets."""

from xls_text_extraction.services.format_detector import FormatDetector, is_file_xls
from xls_text_extraction.services.sheet_converter import (
    SheetConverter,
    xls_to_cells,
    xls_to_csv,
    xls_to_text,
)
from xls_text_extraction.utils.exceptions import (
    SheetNotFoundError,
    SinkWriteError,
    XLSExtractionError,
)

__all__ = [
    "FormatDetector",
    "SheetConverter",
    "SheetNotFoundError",
    "SinkWriteError",
    "XLSExtractionError",
    "is_file_xls",
    "xls_to_cells",
    "xls_to_csv",
    "xls_to_text",
]
__version__ = "0.1.0"
