from __future__ import annotations

import io
import os
from collections.abc import Callable
from unittest.mock import patch

import pytest

from xls_text_extraction.config import Settings
from xls_text_extraction.services.sheet_converter import SheetConverter


class FakeRow:
    """Row whose cells occupy ``[first_col, first_col + len(cells))``."""

    def __init__(self, cells: list[str], first_col: int = 0) -> None:
        self._cells = cells
        self.first_col = first_col
        self.last_col = first_col + len(cells)

    def cell_text(self, col: int) -> str:
        idx = col - self.first_col
        if 0 <= idx < len(self._cells):
            return self._cells[idx]
        return ""


class FakeSheet:
    """Sheet with sparse rows; records every row index requested."""

    def __init__(
        self,
        name: str,
        rows: dict[int, FakeRow | list[str]],
        max_row: int | None = None,
    ) -> None:
        self.name = name
        self._rows = {
            idx: row if isinstance(row, FakeRow) else FakeRow(row)
            for idx, row in rows.items()
        }
        self.max_row = max_row if max_row is not None else max(self._rows, default=0)
        self.requested: list[int] = []

    def row(self, index: int) -> FakeRow | None:
        self.requested.append(index)
        return self._rows.get(index)


class FakeWorkbook:
    def __init__(self, sheets: list[FakeSheet | None]) -> None:
        self._sheets = sheets

    def sheet_count(self) -> int:
        return len(self._sheets)

    def sheet(self, index: int) -> FakeSheet | None:
        if 0 <= index < len(self._sheets):
            return self._sheets[index]
        return None


class FakeReader:
    """WorkbookReader returning a prepared workbook (or None to simulate failure)."""

    def __init__(self, workbook: FakeWorkbook | None) -> None:
        self.workbook = workbook
        self.calls: list[tuple[bytes, str | None]] = []

    def open(self, data: bytes, encoding: str | None = None) -> FakeWorkbook | None:
        self.calls.append((data, encoding))
        return self.workbook


@pytest.fixture
def test_settings() -> Settings:
    """Settings built from defaults only, ignoring the environment."""
    with patch.dict(os.environ, {}, clear=True):
        return Settings(_env_file=None)


@pytest.fixture
def example_workbook() -> FakeWorkbook:
    """One sheet ``Sheet1``: row 0 = [A, B], row 1 = [C, '']."""
    return FakeWorkbook([FakeSheet("Sheet1", {0: ["A", "B"], 1: ["C", ""]})])


@pytest.fixture
def two_sheet_workbook() -> FakeWorkbook:
    return FakeWorkbook(
        [
            FakeSheet("Revenue", {0: ["Region", "Total"], 2: ["North", "1200"]}),
            FakeSheet("Notes", {0: ["line one\nline two"], 1: ["  padded\r  "]}),
        ]
    )


@pytest.fixture
def make_converter(
    test_settings: Settings,
) -> Callable[[FakeWorkbook | None], SheetConverter]:
    """Build a SheetConverter over a fake workbook."""

    def _make(workbook: FakeWorkbook | None) -> SheetConverter:
        return SheetConverter(reader=FakeReader(workbook), settings=test_settings)

    return _make


@pytest.fixture
def fake_row_cls() -> type[FakeRow]:
    return FakeRow


@pytest.fixture
def fake_sheet_cls() -> type[FakeSheet]:
    return FakeSheet


@pytest.fixture
def fake_workbook_cls() -> type[FakeWorkbook]:
    return FakeWorkbook


@pytest.fixture
def fake_reader_cls() -> type[FakeReader]:
    return FakeReader


@pytest.fixture
def legacy_xls_bytes() -> bytes:
    """A real BIFF8 workbook written with xlwt.

    ``Sheet1``: row 0 = [A, B], row 1 = [C], row 2 missing,
    row 3 = {col 2: "tail", col 4: 7}. ``Two``: row 0 = ["x\\ny"].
    """
    import xlwt

    book = xlwt.Workbook()
    first = book.add_sheet("Sheet1")
    first.write(0, 0, "A")
    first.write(0, 1, "B")
    first.write(1, 0, "C")
    first.write(3, 2, "tail")
    first.write(3, 4, 7)

    second = book.add_sheet("Two")
    second.write(0, 0, "x\ny")

    buffer = io.BytesIO()
    book.save(buffer)
    return buffer.getvalue()
