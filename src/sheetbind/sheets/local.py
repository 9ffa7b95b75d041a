"""In-memory spreadsheet implementation."""

import logging
from typing import Optional

from ..errors import SheetNotFoundError
from .base import Spreadsheet
from .models import Columns, ColumnsPatch, Range, Value, to_value, trim_columns

logger = logging.getLogger(__name__)


class InMemorySpreadsheet(Spreadsheet):
    """Spreadsheet backed by lists of columns, one entry per sheet."""

    def __init__(self, by_sheet: dict[str, Columns]):
        self._by_sheet = by_sheet
        for cols in self._by_sheet.values():
            trim_columns(cols)

    @classmethod
    def for_columns(cls, columns_by_sheet: dict[str, Columns]) -> "InMemorySpreadsheet":
        """Create a spreadsheet from columns, copying them."""
        return cls({sheet: [list(c) for c in cols] for sheet, cols in columns_by_sheet.items()})

    @classmethod
    def for_csvs(cls, csvs_by_sheet: dict[str, str]) -> "InMemorySpreadsheet":
        """
        Create a spreadsheet from CSV text, one string per sheet.

        Rows are split on newlines and cells on commas. Every cell is trimmed
        and numeric cells are parsed as numbers.
        """
        by_sheet: dict[str, Columns] = {}
        for sheet, csv in csvs_by_sheet.items():
            rows = [r.split(",") for r in csv.strip().split("\n")]
            width = max(len(r) for r in rows)
            cols: Columns = [[] for _ in range(width)]
            for row in rows:
                for j in range(width):
                    cell = row[j].strip() if j < len(row) else ""
                    cols[j].append(to_value(cell) if cell else "")
            by_sheet[sheet] = cols
        return cls(by_sheet)

    def active_sheets(self) -> list[str]:
        return list(self._by_sheet)

    def read_columns(self, ranges: list[Range]) -> list[Columns]:
        result = []
        for rg in ranges:
            cols = self._sheet_columns(rg.sheet)
            top = (rg.top or 1) - 1
            sliced = [list(c[top : rg.bottom]) for c in cols[(rg.left or 1) - 1 : rg.right]]
            trim_columns(sliced)
            result.append(sliced)
        return result

    def update_columns(self, patches: list[ColumnsPatch]) -> None:
        # Resolve every sheet first so that a bad patch leaves nothing written.
        targets = [self._sheet_columns(p.range.sheet) for p in patches]
        for patch, dst in zip(patches, targets):
            _apply_patch(dst, patch.range, patch.columns)
        for dst in targets:
            trim_columns(dst)
        logger.debug(f"Applied {len(patches)} patch(es)")

    def to_columns(self, sheet: str) -> Columns:
        """Return a copy of a sheet's columns."""
        return [list(c) for c in self._sheet_columns(sheet)]

    def to_csv(self, sheet: str) -> str:
        """Render a sheet in the same CSV format accepted by `for_csvs`."""
        cols = self._sheet_columns(sheet)
        height = max((len(c) for c in cols), default=0)
        lines = []
        for i in range(height):
            cells = [_format_value(c[i]) if i < len(c) else "" for c in cols]
            lines.append(",".join(cells))
        return "\n".join(lines) + ("\n" if lines else "")

    def _sheet_columns(self, sheet: str) -> Columns:
        cols = self._by_sheet.get(sheet)
        if cols is None:
            raise SheetNotFoundError(sheet)
        return cols


def _apply_patch(dst: Columns, rg: Range, src: Columns) -> None:
    j0 = (rg.left or 1) - 1
    width = len(src) if rg.right is None else min(rg.right - j0, len(src))
    i0 = (rg.top or 1) - 1
    height = max((len(c) for c in src), default=0)
    if rg.bottom is not None:
        height = min(rg.bottom - i0, height)
    for dj in range(width):
        j = j0 + dj
        while len(dst) <= j:
            dst.append([])
        col = dst[j]
        if len(col) < i0 + height:
            col.extend([""] * (i0 + height - len(col)))
        src_col = src[dj]
        for di in range(height):
            col[i0 + di] = src_col[di] if di < len(src_col) else ""


def _format_value(value: Optional[Value]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return "" if value is None else str(value)
