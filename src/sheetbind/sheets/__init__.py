"""Column-oriented spreadsheet access."""

from .base import Spreadsheet
from .client import GoogleSheetsSpreadsheet
from .local import InMemorySpreadsheet
from .models import (
    Column,
    Columns,
    ColumnsPatch,
    Range,
    Value,
    column_index_to_letters,
    column_letters_to_index,
    constant_columns,
    is_empty_column,
    to_value,
    trim_columns,
)

__all__ = [
    "Spreadsheet",
    "GoogleSheetsSpreadsheet",
    "InMemorySpreadsheet",
    "Column",
    "Columns",
    "ColumnsPatch",
    "Range",
    "Value",
    "column_index_to_letters",
    "column_letters_to_index",
    "constant_columns",
    "is_empty_column",
    "to_value",
    "trim_columns",
]
