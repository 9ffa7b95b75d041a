"""Header normalization and table detection."""

from .detector import (
    TableFinder,
    common_height,
    identify_tables,
    parse_table_header,
    pivot_row,
)
from .headers import Header, new_header
from .models import BlockKind, SlimBlock, Table, TableBlock, WideBlock

__all__ = [
    "TableFinder",
    "common_height",
    "identify_tables",
    "parse_table_header",
    "pivot_row",
    "Header",
    "new_header",
    "BlockKind",
    "SlimBlock",
    "Table",
    "TableBlock",
    "WideBlock",
]
