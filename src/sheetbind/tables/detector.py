"""Table detection from a sheet's header rows."""

import logging
from typing import Optional

from ..config import settings
from ..errors import (
    DuplicateTableHeaderError,
    JaggedKeyColumnsError,
    NumericHeaderError,
    TableError,
    UnalignedTableHeadersError,
)
from ..sheets.base import Spreadsheet
from ..sheets.models import Columns, Range, Value, is_empty_column
from .headers import Header, new_header
from .models import SlimBlock, Table, TableBlock, WideBlock

logger = logging.getLogger(__name__)


def identify_tables(spreadsheet: Spreadsheet, header_rows: Optional[int] = None) -> list[Table]:
    """
    Find all tables across the spreadsheet's active sheets.

    Only the top `header_rows` rows of each sheet are scanned: the outer
    header row and, for wide blocks, the pivot row beneath it. All sheets are
    read in a single batch.
    """
    depth = header_rows or settings.table_header_rows
    sheets = spreadsheet.active_sheets()
    groups = spreadsheet.read_columns([Range(sheet=s, bottom=depth) for s in sheets])

    tables: list[Table] = []
    for sheet, cols in zip(sheets, groups):
        finder = TableFinder(sheet, cols)
        count = 0
        while (table := finder.find_table()) is not None:
            tables.append(table)
            count += 1
        logger.info(f"Found {count} table(s) in sheet '{sheet}'")
    return tables


class TableFinder:
    """Scans a sheet's columns left to right, one table at a time."""

    def __init__(self, sheet: str, columns: Columns):
        self.sheet = sheet
        self.columns = columns
        self.index = 0

    def find_table(self) -> Optional[Table]:
        """Return the next table, or None once all columns are consumed."""
        self._skip_empty_columns()
        blocks: dict[Header, TableBlock] = {}
        top: Optional[int] = None
        while self.index < len(self.columns):
            block = self._current_block()
            if block is None:
                break
            if top is None:
                top = block.body_range.top
            elif top != block.body_range.top:
                raise UnalignedTableHeadersError(block.header, block.body_range.top, top)
            if block.header in blocks:
                raise DuplicateTableHeaderError(block.header)
            blocks[block.header] = block
            logger.debug(f"Detected {block.kind.value} block '{block.header}' in '{self.sheet}'")
        return Table(blocks=blocks) if blocks else None

    def _skip_empty_columns(self) -> None:
        while self.index < len(self.columns) and is_empty_column(self.columns[self.index]):
            self.index += 1

    def _current_block(self) -> Optional[TableBlock]:
        if self.index >= len(self.columns):
            return None
        col = self.columns[self.index]
        if is_empty_column(col):
            return None

        i = 0
        while col[i] == "":
            i += 1
        left = self.index + 1
        header, nested = parse_table_header(col[i])
        self.index += 1
        if nested is None:
            return SlimBlock(
                header=header,
                body_range=Range(sheet=self.sheet, top=i + 2, left=left, right=left),
            )

        # Pivot categories extend until the next header cell on the same row
        # or the next empty column.
        while self.index < len(self.columns) and _is_blank_at(self.columns[self.index], i):
            self.index += 1
        right = self.index
        return WideBlock(
            header=header,
            nested_header=nested,
            head_range=Range(sheet=self.sheet, top=i + 2, bottom=i + 2, left=left, right=right),
            body_range=Range(sheet=self.sheet, top=i + 3, left=left, right=right),
        )


def parse_table_header(value: Value) -> tuple[Header, Optional[Header]]:
    """Parse a header cell as `name` or `name/nested`."""
    if not isinstance(value, str):
        raise NumericHeaderError(value)
    parts = value.split("/")
    nested = new_header(parts[1]) if len(parts) > 1 else None
    return new_header(parts[0]), nested


def common_height(columns: Columns) -> int:
    """Return the shared length of row-aligned columns, -1 if there are none."""
    if not columns:
        return -1
    heights = [len(c) for c in columns]
    if any(h != heights[0] for h in heights):
        raise JaggedKeyColumnsError(heights)
    return heights[0]


def _is_blank_at(col: list[Value], i: int) -> bool:
    return i < len(col) and col[i] == ""


def pivot_row(columns: Columns) -> list[Value]:
    """Return the category labels of a wide block's head range, one per column."""
    row = []
    for col in columns:
        if len(col) != 1:
            raise TableError(f"Invalid pivot column (expected one header cell, got {col})")
        row.append(col[0])
    return row
