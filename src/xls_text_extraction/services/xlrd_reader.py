"""Workbook reader backed by xlrd.

xlrd owns every detail of the OLE2 container and BIFF record decoding. This
module only adapts its sheets to the ``Workbook``/``Sheet``/``Row`` protocols
and renders typed cell values as text.
"""

from __future__ import annotations

import datetime as dt

import xlrd
from xlrd.book import Book
from xlrd.biffh import error_text_from_code
from xlrd.sheet import Sheet as XlrdSheet
from xlrd.xldate import XLDateError, xldate_as_datetime

from xls_text_extraction.utils.logging import get_logger

logger = get_logger(__name__)

_EMPTY_TYPES = frozenset({xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK})


class _XlrdLogStream:
    """File-like target for xlrd's diagnostics so they land in our logs."""

    def write(self, text: str) -> int:
        message = text.strip()
        if message:
            logger.debug("xlrd diagnostic", message=message)
        return len(text)

    def flush(self) -> None:
        pass


def format_number(value: float) -> str:
    """Render a numeric cell the way it reads in a spreadsheet: ``3`` not ``3.0``."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_date(value: float, datemode: int) -> str:
    """Render an Excel serial date as ISO text, falling back to the raw number."""
    try:
        moment = xldate_as_datetime(value, datemode)
    except (XLDateError, ValueError, OverflowError):
        return format_number(value)
    if value < 1:
        return moment.time().isoformat()
    if moment.time() == dt.time(0, 0):
        return moment.date().isoformat()
    return moment.isoformat(sep=" ")


class XlrdRow:
    """One populated row of an xlrd sheet."""

    def __init__(
        self, sheet: XlrdSheet, index: int, first_col: int, last_col: int, datemode: int
    ) -> None:
        self._sheet = sheet
        self._index = index
        self._first_col = first_col
        self._last_col = last_col
        self._datemode = datemode

    @property
    def first_col(self) -> int:
        return self._first_col

    @property
    def last_col(self) -> int:
        return self._last_col

    def cell_text(self, col: int) -> str:
        if col < 0 or col >= self._sheet.row_len(self._index):
            return ""
        cell = self._sheet.cell(self._index, col)
        if cell.ctype in _EMPTY_TYPES:
            return ""
        if cell.ctype == xlrd.XL_CELL_TEXT:
            return str(cell.value)
        if cell.ctype == xlrd.XL_CELL_NUMBER:
            return format_number(cell.value)
        if cell.ctype == xlrd.XL_CELL_DATE:
            return format_date(cell.value, self._datemode)
        if cell.ctype == xlrd.XL_CELL_BOOLEAN:
            return "TRUE" if cell.value else "FALSE"
        if cell.ctype == xlrd.XL_CELL_ERROR:
            return error_text_from_code.get(cell.value, "#ERR")
        return str(cell.value)


class XlrdSheetView:
    """Sheet view with sparse rows: a row without any filled cell is absent."""

    def __init__(self, sheet: XlrdSheet, datemode: int) -> None:
        self._sheet = sheet
        self._datemode = datemode

    @property
    def name(self) -> str:
        return str(self._sheet.name)

    @property
    def max_row(self) -> int:
        return max(self._sheet.nrows - 1, 0)

    def row(self, index: int) -> XlrdRow | None:
        if index < 0 or index >= self._sheet.nrows:
            return None
        length = self._sheet.row_len(index)
        types = self._sheet.row_types(index, 0, length)
        first_col = next(
            (col for col, ctype in enumerate(types) if ctype not in _EMPTY_TYPES),
            None,
        )
        if first_col is None:
            return None
        return XlrdRow(self._sheet, index, first_col, length, self._datemode)


class XlrdWorkbook:
    def __init__(self, book: Book) -> None:
        self._book = book

    def sheet_count(self) -> int:
        return int(self._book.nsheets)

    def sheet(self, index: int) -> XlrdSheetView | None:
        if index < 0 or index >= self._book.nsheets:
            return None
        return XlrdSheetView(self._book.sheet_by_index(index), self._book.datemode)


class XlrdWorkbookReader:
    """Open legacy ``.xls`` content with xlrd.

    Any failure inside xlrd (corrupt container, unsupported BIFF version,
    truncated stream) yields None: unparsable input has nothing to extract.
    """

    def open(self, data: bytes, encoding: str | None = None) -> XlrdWorkbook | None:
        if not data:
            return None
        try:
            book = xlrd.open_workbook(
                file_contents=data,
                encoding_override=encoding,
                ragged_rows=True,
                logfile=_XlrdLogStream(),
            )
        except Exception as e:
            logger.warning(
                "Failed to open workbook",
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
        logger.debug(
            "Opened workbook", sheets=book.nsheets, biff_version=book.biff_version
        )
        return XlrdWorkbook(book)
