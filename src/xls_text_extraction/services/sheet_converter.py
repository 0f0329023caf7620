"""Text, CSV and cell-list extraction from legacy binary spreadsheets.

The converter walks the sheets, rows and cells exposed by a ``WorkbookReader``
and reformats them. It never inspects the binary format itself.

Workbooks that cannot be opened are treated as having nothing to extract:
``extract_text`` returns 0, ``extract_csv`` returns None and ``extract_cells``
returns an empty list. The reader logs why at warning level. Explicit failures
are limited to missing or oversize sources, an unknown sheet index and a
failing output sink.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any, Protocol

import pandas as pd

from xls_text_extraction.config import Settings
from xls_text_extraction.config import settings as default_settings
from xls_text_extraction.services.xlrd_reader import XlrdWorkbookReader
from xls_text_extraction.utils.exceptions import (
    FileTooLargeError,
    SheetNotFoundError,
    SinkWriteError,
    SourceNotFoundError,
)
from xls_text_extraction.utils.logging import (
    LogContext,
    PerformanceMetrics,
    apply_log_level,
    get_logger,
    timed_operation,
)
from xls_text_extraction.workbook import (
    Row,
    Sheet,
    Workbook,
    WorkbookReader,
    WorkbookSource,
)

logger = get_logger(__name__)


class BinarySink(Protocol):
    def write(self, data: bytes, /) -> Any: ...


def clean_cell(text: str) -> str:
    """Return cell text on a single line without surrounding whitespace."""
    return text.replace("\n", " ").replace("\r", "").strip()


def wrap_csv_cell(text: str) -> str:
    # Embedded quotes are left as-is.
    return f'"{clean_cell(text)}"'


def sheet_title(name: str, index: int, max_row: int) -> str:
    """Build the heading line emitted before a sheet's rows.

    Every sheet after the first gets a blank line in front of it.
    """
    title = "\n" if index > 0 else ""
    return title + f'Sheet "{clean_cell(name)}" ({max_row} rows):\n'


def render_row(row: Row) -> str:
    """Join the non-empty cells of a row with ``", "``.

    The separator depends on the cell's column relative to ``first_col``,
    not on how many cells were emitted before it.
    """
    row_text = ""
    for col in range(row.first_col, row.last_col):
        text = row.cell_text(col)
        if text:
            if col > row.first_col:
                row_text += ", "
            row_text += clean_cell(text)
    return row_text + "\n"


def read_source(source: WorkbookSource, max_size: int | None = None) -> bytes:
    """Load a whole workbook source into memory.

    Args:
        source: Raw bytes, a filesystem path or a readable binary stream.
            Seekable streams are rewound to the start first.
        max_size: Optional size limit in bytes.

    Raises:
        SourceNotFoundError: If a path source does not exist.
        FileTooLargeError: If the source is larger than ``max_size``.
    """
    file_path: str | None = None
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    elif isinstance(source, (str, Path)) or hasattr(source, "__fspath__"):
        path = Path(source)  # type: ignore[arg-type]
        file_path = str(path)
        if not path.is_file():
            raise SourceNotFoundError(file_path)
        size = path.stat().st_size
        if max_size is not None and size > max_size:
            raise FileTooLargeError(size, max_size, file_path=file_path)
        data = path.read_bytes()
    else:
        if source.seekable():
            source.seek(0)
        data = source.read()

    if max_size is not None and len(data) > max_size:
        raise FileTooLargeError(len(data), max_size, file_path=file_path)
    return data


class BoundedWriter:
    """Write to a sink until a byte budget runs out.

    Each chunk is cut down to the remaining budget, the budget is reduced by
    the chunk's length, and only then is the chunk written.
    """

    def __init__(self, sink: BinarySink, max_bytes: int) -> None:
        self._sink = sink
        self.remaining = max_bytes
        self.written = 0
        self.truncated = False

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0

    def write(self, chunk: bytes) -> bool:
        """Write ``chunk`` within the budget.

        Returns:
            True once the budget is used up and nothing more should be written.

        Raises:
            SinkWriteError: If the sink fails or accepts fewer bytes than
                offered; ``bytes_written`` counts what reached the sink.
        """
        if len(chunk) > self.remaining:
            chunk = chunk[: max(self.remaining, 0)]
            self.truncated = True
        self.remaining -= len(chunk)

        if chunk:
            try:
                count = self._sink.write(chunk)
            except (OSError, ValueError) as e:
                raise SinkWriteError(
                    f"Failed to write to output sink: {e}",
                    bytes_written=self.written,
                ) from e
            if count is not None and count < len(chunk):
                self.written += max(int(count), 0)
                raise SinkWriteError(
                    f"Short write to output sink: {count} of {len(chunk)} bytes",
                    bytes_written=self.written,
                )
            self.written += len(chunk)

        return self.exhausted


class SheetConverter:
    """Convert legacy spreadsheets to text, CSV, cell lists or DataFrames.

    Each call opens its own workbook, so a single converter can serve
    concurrent callers as long as each brings its own source and sink.
    Log lines emitted during a call carry ``operation=<name>``.

    Args:
        reader: Capability that parses workbook bytes. Defaults to xlrd.
        settings: Settings to use instead of the module-level instance.
            ``settings.log_level`` is applied to the package logger.
    """

    def __init__(
        self,
        reader: WorkbookReader | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._reader: WorkbookReader = reader or XlrdWorkbookReader()
        self._settings = settings or default_settings
        apply_log_level(self._settings.log_level_int)
        logger.debug("Converter configured", **self._settings.to_safe_dict())

    def extract_text(
        self,
        source: WorkbookSource,
        sink: BinarySink,
        max_bytes: int | None = None,
    ) -> int:
        """Write a plain-text rendering of every sheet to ``sink``.

        Args:
            source: Workbook bytes, path or binary stream.
            sink: Binary writable object receiving UTF-8 text.
            max_bytes: Maximum number of bytes (not characters) to write.
                Defaults to ``settings.default_max_bytes``.

        Returns:
            Number of bytes written. 0 for a workbook that cannot be opened.

        Raises:
            SinkWriteError: If writing to ``sink`` fails.
        """
        budget = self._settings.default_max_bytes if max_bytes is None else max_bytes
        with LogContext(operation="text"):
            workbook = self._open(source)
            if workbook is None:
                return 0

            writer = BoundedWriter(sink, budget)
            with timed_operation(logger, "text") as metrics:
                try:
                    self._write_text(workbook, writer, metrics)
                finally:
                    metrics.bytes_written = writer.written
                    metrics.truncated = writer.truncated

        return writer.written

    def extract_csv(self, source: WorkbookSource, sheet_index: int) -> bytes | None:
        """Render one sheet as CSV.

        Every cell in a row's column range is cleaned and wrapped in double
        quotes; embedded quotes are not escaped. Rows run from index 0 up to,
        but not including, the sheet's ``max_row``.

        Returns:
            UTF-8 CSV bytes, or None for a workbook that cannot be opened.

        Raises:
            SheetNotFoundError: If ``sheet_index`` does not exist.
        """
        with LogContext(operation="csv", sheet_index=sheet_index):
            workbook = self._open(source)
            if workbook is None:
                return None

            sheet = self._get_sheet(workbook, sheet_index, operation="csv")
            with timed_operation(logger, "csv") as metrics:
                metrics.sheets_processed = 1
                rows: list[str] = []
                for row_index in range(sheet.max_row):
                    row = sheet.row(row_index)
                    if row is None:
                        continue
                    columns = [
                        wrap_csv_cell(row.cell_text(col))
                        for col in range(row.first_col, row.last_col)
                    ]
                    metrics.rows_processed += 1
                    metrics.cells_emitted += len(columns)
                    rows.append(",".join(columns))
                output = "\n".join(rows).encode("utf-8")
                metrics.bytes_written = len(output)

        return output

    def extract_cells(self, source: WorkbookSource) -> list[str]:
        """Collect the cleaned text of every non-empty cell across all sheets.

        Emptiness is judged on the raw text, so a whitespace-only cell is kept
        as an empty string.
        """
        with LogContext(operation="cells"):
            workbook = self._open(source)
            if workbook is None:
                return []

            cells: list[str] = []
            with timed_operation(logger, "cells") as metrics:
                for sheet in self._iter_sheets(workbook):
                    metrics.sheets_processed += 1
                    for row in self._iter_rows(sheet):
                        metrics.rows_processed += 1
                        for col in range(row.first_col, row.last_col):
                            text = row.cell_text(col)
                            if text:
                                cells.append(clean_cell(text))
                metrics.cells_emitted = len(cells)

        return cells

    def extract_dataframe(
        self,
        source: WorkbookSource,
        sheet_index: int = 0,
        header: bool = True,
    ) -> pd.DataFrame | None:
        """Extract one sheet as a DataFrame of cleaned cell text.

        Absent rows are dropped and rows are padded to the widest row. With
        ``header`` the first present row names the columns; blank header cells
        become ``col_<n>``.

        Raises:
            SheetNotFoundError: If ``sheet_index`` does not exist.
        """
        with LogContext(operation="dataframe", sheet_index=sheet_index):
            workbook = self._open(source)
            if workbook is None:
                return None

            sheet = self._get_sheet(workbook, sheet_index, operation="dataframe")
            grid: list[list[str]] = []
            for row in self._iter_rows(sheet):
                values = [""] * row.last_col
                for col in range(max(row.first_col, 0), row.last_col):
                    values[col] = clean_cell(row.cell_text(col))
                grid.append(values)

        width = max((len(values) for values in grid), default=0)
        for values in grid:
            values.extend([""] * (width - len(values)))

        generic = [f"col_{idx + 1}" for idx in range(width)]
        if header and grid:
            columns = [name or generic[idx] for idx, name in enumerate(grid[0])]
            return pd.DataFrame(grid[1:], columns=columns)
        return pd.DataFrame(grid, columns=generic)

    def _open(self, source: WorkbookSource) -> Workbook | None:
        data = read_source(source, self._settings.max_file_size_bytes)
        workbook = self._reader.open(data, self._settings.encoding_override)
        if workbook is None:
            logger.debug("Nothing to extract", source_bytes=len(data))
        return workbook

    @staticmethod
    def _get_sheet(workbook: Workbook, sheet_index: int, operation: str) -> Sheet:
        sheet = workbook.sheet(sheet_index) if sheet_index >= 0 else None
        if sheet is None:
            raise SheetNotFoundError(
                sheet_index, sheet_count=workbook.sheet_count(), operation=operation
            )
        return sheet

    @staticmethod
    def _iter_sheets(workbook: Workbook) -> Iterator[Sheet]:
        for index in range(workbook.sheet_count()):
            sheet = workbook.sheet(index)
            if sheet is not None:
                yield sheet

    @staticmethod
    def _iter_rows(sheet: Sheet) -> Iterator[Row]:
        # max_row is an index, so the range is inclusive of it
        for row_index in range(sheet.max_row + 1):
            row = sheet.row(row_index)
            if row is not None:
                yield row

    @staticmethod
    def _write_text(
        workbook: Workbook, writer: BoundedWriter, metrics: PerformanceMetrics
    ) -> None:
        for index in range(workbook.sheet_count()):
            sheet = workbook.sheet(index)
            if sheet is None:
                continue
            metrics.sheets_processed += 1
            title = sheet_title(sheet.name, index, sheet.max_row)
            if writer.write(title.encode("utf-8")):
                return

            for row in SheetConverter._iter_rows(sheet):
                metrics.rows_processed += 1
                if writer.write(render_row(row).encode("utf-8")):
                    return


_default_converter: SheetConverter | None = None


def _converter() -> SheetConverter:
    global _default_converter
    if _default_converter is None:
        _default_converter = SheetConverter()
    return _default_converter


def xls_to_text(
    source: WorkbookSource, sink: BinarySink, max_bytes: int | None = None
) -> int:
    """Shortcut for ``SheetConverter().extract_text``."""
    return _converter().extract_text(source, sink, max_bytes)


def xls_to_csv(source: WorkbookSource, sheet_index: int = 0) -> bytes | None:
    """Shortcut for ``SheetConverter().extract_csv``."""
    return _converter().extract_csv(source, sheet_index)


def xls_to_cells(source: WorkbookSource) -> list[str]:
    """Shortcut for ``SheetConverter().extract_cells``."""
    return _converter().extract_cells(source)
