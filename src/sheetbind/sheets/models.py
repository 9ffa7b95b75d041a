"""Data models for column-oriented spreadsheet access."""

import re
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..errors import UnboundedRangeError, UnsupportedValueError

# Cells are either strings or numbers, the empty cell is ''.
Value = Union[str, int, float]
Column = list[Value]
Columns = list[Column]

_NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def to_value(arg: object) -> Value:
    """Coerce a raw cell into a value, parsing numeric strings as numbers."""
    if arg is None:
        return ""
    if isinstance(arg, bool):
        raise UnsupportedValueError(arg)
    if isinstance(arg, (int, float)):
        return arg
    if isinstance(arg, str):
        text = arg.strip()
        if _NUMBER_PATTERN.fullmatch(text):
            if any(c in text for c in ".eE"):
                return float(text)
            return int(text)
        return arg
    raise UnsupportedValueError(arg)


def is_empty_column(col: Column) -> bool:
    """Return whether every cell of a column is empty."""
    return all(v == "" for v in col)


def column_index_to_letters(seqno: int) -> str:
    """Convert a 1-based column number to letters. 1=A, 26=Z, 27=AA, etc."""
    if seqno <= 0:
        raise ValueError(f"Invalid column number: {seqno}")
    result = ""
    while seqno > 0:
        seqno, rem = divmod(seqno - 1, 26)
        result = chr(ord("A") + rem) + result
    return result


def column_letters_to_index(col: str) -> int:
    """Convert column letter(s) to a 1-based column number."""
    result = 0
    for char in col.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result


class Range(BaseModel):
    """A rectangular region of a sheet.

    Bounds are 1-based and inclusive. A missing bound is open and extends to
    the corresponding edge of the sheet.
    """

    model_config = ConfigDict(frozen=True)

    sheet: str
    top: Optional[int] = Field(default=None, ge=1)
    bottom: Optional[int] = Field(default=None, ge=1)
    left: Optional[int] = Field(default=None, ge=1)
    right: Optional[int] = Field(default=None, ge=1)

    @property
    def a1(self) -> str:
        """Canonical A1 address, also used to deduplicate ranges."""
        sheet = self.sheet.replace("'", "''")
        left = column_index_to_letters(self.left or 1)
        right = column_index_to_letters(self.right) if self.right is not None else "ZZZ"
        bottom = self.bottom if self.bottom is not None else ""
        return f"'{sheet}'!{left}{self.top or 1}:{right}{bottom}"

    @property
    def width(self) -> Optional[int]:
        if self.right is None:
            return None
        return self.right - (self.left or 1) + 1

    @property
    def height(self) -> Optional[int]:
        if self.bottom is None:
            return None
        return self.bottom - (self.top or 1) + 1

    def with_bounds(self, **bounds: Optional[int]) -> "Range":
        """Return a copy of this range with some bounds replaced."""
        return self.model_copy(update=bounds)

    def sort_key(self) -> tuple[str, int, int]:
        return (self.sheet, self.left or 1, self.top or 1)

    def __str__(self) -> str:
        return self.a1


class ColumnsPatch(BaseModel):
    """Values to write into a range, one list per column."""

    range: Range
    columns: Columns = Field(default_factory=list)


def constant_columns(rg: Range, value: Value) -> Columns:
    """Build columns covering a fully bounded range, filled with one value."""
    width, height = rg.width, rg.height
    if width is None or height is None:
        raise UnboundedRangeError(f"Unbounded range {rg.a1}")
    return [[value] * height for _ in range(width)]


def trim_columns(cols: Columns) -> None:
    """Drop trailing empty cells of each column, then trailing empty columns."""
    for col in cols:
        while col and col[-1] == "":
            col.pop()
    while cols and not cols[-1]:
        cols.pop()
