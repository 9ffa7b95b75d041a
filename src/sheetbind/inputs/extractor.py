"""Extraction of model inputs from mapped spreadsheet ranges."""

import logging
from typing import Optional

from ..errors import InvalidMappingError, NonNumericItemError, NonNumericValueError
from ..mapping.layout import LayoutKind, TensorLayout, classify
from ..mapping.models import InputMapping, TensorMapping
from ..outline.models import (
    DimensionInput,
    InputValues,
    KeyItem,
    TensorEntry,
    TensorInput,
    is_almost,
)
from ..sheets.base import Spreadsheet
from ..sheets.models import Column, Value
from ..tables.detector import common_height, pivot_row

logger = logging.getLogger(__name__)


def extract_input_values(mapping: InputMapping, spreadsheet: Spreadsheet) -> InputValues:
    """
    Read dimension items, parameter entries and pinned variables.

    Value cells that are blank or within epsilon of zero produce no entry, the
    same default the result injector fills unwritten cells with. Variables
    without any entry are not pinned.
    """
    dimensions = []
    for dim in mapping.dimensions:
        items: dict[KeyItem, None] = {}
        for cols in spreadsheet.read_columns(dim.item_ranges):
            for col in cols:
                for value in col:
                    if value == "":
                        continue
                    if dim.is_numeric and isinstance(value, str):
                        raise NonNumericItemError(dim.label, value)
                    items[value] = None
        dimensions.append(DimensionInput(label=dim.label, items=list(items)))

    gatherer = TensorInputGatherer(spreadsheet)
    parameters = [gatherer.gather_input(p) for p in mapping.parameters]

    pinned = []
    for variable in mapping.variables:
        tensor_input = gatherer.gather_input(variable)
        if tensor_input.entries:
            pinned.append(tensor_input)

    logger.info(
        f"Extracted {len(dimensions)} dimension(s), {len(parameters)} parameter(s) "
        f"and {len(pinned)} pinned variable(s)"
    )
    return InputValues(dimensions=dimensions, parameters=parameters, pinned_variables=pinned)


class TensorInputGatherer:
    """Reads the sparse entries of one tensor mapping at a time."""

    def __init__(self, spreadsheet: Spreadsheet):
        self.spreadsheet = spreadsheet

    def gather_input(self, mapping: TensorMapping) -> TensorInput:
        layout = classify(mapping)
        groups = self.spreadsheet.read_columns(
            [layout.value_range] + [box.range for box in mapping.key_boxes]
        )
        value_cols, key_groups = groups[0], groups[1:]
        key_cols = {ix: _slim(key_groups[ix]) for ix in layout.column_indices}

        if layout.kind in (LayoutKind.SLIM_UNPROJECTED, LayoutKind.SLIM_PROJECTED):
            entries = self._gather_slim(mapping.label, layout, key_cols, _slim(value_cols))
        else:
            pivots = pivot_row(key_groups[layout.pivot_index])
            entries = self._gather_wide(mapping.label, layout, key_cols, pivots, value_cols)
        logger.debug(f"Gathered {len(entries)} entries for {mapping.label}")
        return TensorInput(label=mapping.label, entries=entries)

    def _gather_slim(
        self,
        label: str,
        layout: TensorLayout,
        key_cols: dict[int, Column],
        value_col: Column,
    ) -> list[TensorEntry]:
        if key_cols:
            height = common_height(list(key_cols.values()))
        elif layout.is_projected:
            height = len(value_col)
        else:
            height = 1  # Scalar

        entries = []
        for i in range(height):
            cell = _cell(value_col, i)
            key = _row_key(layout.width, key_cols, i)
            if layout.is_projected:
                if cell == "":
                    continue
                key[layout.value_index] = cell
                entries.append(TensorEntry(key=key, value=1))
            else:
                value = _read_number(label, cell)
                if value is not None:
                    entries.append(TensorEntry(key=key, value=value))
        return entries

    def _gather_wide(
        self,
        label: str,
        layout: TensorLayout,
        key_cols: dict[int, Column],
        pivots: list[Value],
        value_cols: list[Column],
    ) -> list[TensorEntry]:
        # Without key columns, the first body row holds the only values.
        height = common_height(list(key_cols.values())) if key_cols else 1

        entries = []
        for i in range(height):
            partial_key = _row_key(layout.width, key_cols, i)
            for j, pivot in enumerate(pivots):
                cell = _cell(value_cols[j], i) if j < len(value_cols) else ""
                key = list(partial_key)
                key[layout.pivot_index] = pivot
                if layout.is_projected:
                    if cell == "":
                        continue
                    key[layout.value_index] = cell
                    entries.append(TensorEntry(key=key, value=1))
                else:
                    value = _read_number(label, cell)
                    if value is not None:
                        entries.append(TensorEntry(key=key, value=value))
        return entries


def _slim(cols: list[Column]) -> Column:
    if len(cols) > 1:
        raise InvalidMappingError(f"Expected a single column, got {len(cols)}")
    return cols[0] if cols else []


def _cell(col: Column, i: int) -> Value:
    return col[i] if i < len(col) else ""


def _row_key(width: int, key_cols: dict[int, Column], i: int) -> list[KeyItem]:
    key: list[KeyItem] = [""] * width
    for ix, col in key_cols.items():
        key[ix] = col[i]
    return key


def _read_number(label: str, cell: Value) -> Optional[float]:
    """Return a cell's number, or None if the cell holds the default value."""
    if cell == "":
        return None
    if isinstance(cell, str):
        raise NonNumericValueError(label, cell)
    return None if is_almost(cell, 0) else cell
