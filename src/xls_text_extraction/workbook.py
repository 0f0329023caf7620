"""Read-only views of a parsed legacy spreadsheet.

The converter only talks to these protocols, so any parser that can expose
sheets, rows and cell text can be plugged in through a ``WorkbookReader``.
"""

from __future__ import annotations

from os import PathLike
from typing import BinaryIO, Protocol, runtime_checkable

WorkbookSource = bytes | bytearray | str | PathLike[str] | BinaryIO
"""Anything a workbook can be opened from: raw bytes, a path or a binary stream."""


@runtime_checkable
class Row(Protocol):
    """A populated row; columns span the half-open range ``[first_col, last_col)``."""

    @property
    def first_col(self) -> int: ...

    @property
    def last_col(self) -> int: ...

    def cell_text(self, col: int) -> str:
        """Return the string rendering of a cell; empty string means no content."""
        ...


@runtime_checkable
class Sheet(Protocol):
    """A worksheet. ``max_row`` is the highest row index, not a count."""

    @property
    def name(self) -> str: ...

    @property
    def max_row(self) -> int: ...

    def row(self, index: int) -> Row | None:
        """Return the row at ``index``, or None when the row holds nothing."""
        ...


@runtime_checkable
class Workbook(Protocol):
    def sheet_count(self) -> int: ...

    def sheet(self, index: int) -> Sheet | None: ...


class WorkbookReader(Protocol):
    """Opens a source into a Workbook.

    Implementations return None for input they cannot parse instead of raising.
    """

    def open(self, data: bytes, encoding: str | None = None) -> Workbook | None: ...
