"""Injection of solver results into mapped spreadsheet ranges.

Both entry points are all-or-nothing: the sheets touched by the mapping are
read once into an in-memory snapshot, every variable is injected into the
snapshot, and the recorded patches are flushed to the spreadsheet in a single
batch only once all variables succeeded.
"""

import logging
from typing import Optional

from ..config import settings
from ..errors import (
    ConflictingKeyHashError,
    ConflictingResultEntryError,
    DuplicatePivotValueError,
    InjectionError,
    InvalidMappingError,
    InvalidScalarResultError,
    MissingResultError,
    NonIndicatorValueError,
    SnapshotTooLargeError,
    UnspecifiedPivotValueError,
)
from ..mapping.layout import TensorLayout, classify
from ..mapping.models import InputMapping, TensorMapping
from ..outline.models import KeyItem, TensorEntry, TensorResult, is_almost
from ..sheets.base import Spreadsheet
from ..sheets.local import InMemorySpreadsheet
from ..sheets.models import Column, Columns, ColumnsPatch, Range, Value, constant_columns
from ..tables.detector import common_height, pivot_row
from .keys import EncodedItem, EncodedKey, describe_key, encode_item, encode_key

logger = logging.getLogger(__name__)


def populate_results(
    results: list[TensorResult],
    mapping: InputMapping,
    spreadsheet: Spreadsheet,
) -> list[ColumnsPatch]:
    """
    Write each mapped variable's result into its table.

    Existing rows are matched by key, missing rows are appended below the
    table's current end and unwritten value cells are reset to their default.

    Args:
        results: Solver output, at least one result per mapped variable
        mapping: Input mapping computed for the spreadsheet's current tables
        spreadsheet: Destination spreadsheet

    Returns:
        The patches flushed to the spreadsheet

    Raises:
        InjectionError: If a result cannot be written, in which case nothing
            is written
    """
    by_label = {r.label: r for r in results}
    injector = ResultInjector(take_snapshot(mapping, spreadsheet))
    for variable in mapping.variables:
        result = by_label.get(variable.label)
        if result is None:
            raise MissingResultError(variable.label)
        injector.inject(variable, result)
    return injector.flush(spreadsheet)


def reset_results(mapping: InputMapping, spreadsheet: Spreadsheet) -> list[ColumnsPatch]:
    """
    Clear the value cells of every mapped variable.

    Each variable's value range is reset over as many rows as its tallest key
    column, and at least one row.
    """
    injector = ResultInjector(take_snapshot(mapping, spreadsheet))
    for variable in mapping.variables:
        injector.reset(variable)
    return injector.flush(spreadsheet)


def take_snapshot(mapping: InputMapping, spreadsheet: Spreadsheet) -> InMemorySpreadsheet:
    """Read every sheet referenced by the mapping's variables in one batch."""
    sheets: list[str] = []
    for variable in mapping.variables:
        ranges = [box.range for box in variable.key_boxes]
        if variable.value_range is not None:
            ranges.append(variable.value_range)
        for rg in ranges:
            if rg.sheet not in sheets:
                sheets.append(rg.sheet)

    groups = spreadsheet.read_columns([Range(sheet=s) for s in sheets]) if sheets else []
    cells = sum(len(col) for cols in groups for col in cols)
    if cells > settings.max_snapshot_cells:
        raise SnapshotTooLargeError(
            f"Snapshot of {len(sheets)} sheet(s) holds {cells} cells "
            f"(limit: {settings.max_snapshot_cells})"
        )
    logger.debug(f"Took snapshot of {len(sheets)} sheet(s) ({cells} cells)")
    return InMemorySpreadsheet(dict(zip(sheets, groups)))


class ResultInjector:
    """Writes results into a snapshot, recording the patches it applies."""

    def __init__(self, snapshot: InMemorySpreadsheet):
        self.snapshot = snapshot
        self.patches: list[ColumnsPatch] = []

    def flush(self, spreadsheet: Spreadsheet) -> list[ColumnsPatch]:
        """Apply all recorded patches to the spreadsheet in one batch."""
        if self.patches:
            spreadsheet.update_columns(self.patches)
        logger.info(f"Flushed {len(self.patches)} patch(es)")
        return self.patches

    def reset(self, mapping: TensorMapping) -> None:
        layout = classify(mapping)
        height = 1
        ranges = [mapping.key_boxes[ix].range for ix in layout.column_indices]
        if ranges:
            for cols in self.snapshot.read_columns(ranges):
                height = max(height, len(_slim(cols)))
        rg = _bounded(layout.value_range, height)
        self._write([ColumnsPatch(range=rg, columns=constant_columns(rg, _default(layout)))])
        logger.debug(f"Reset {height} row(s) of {mapping.label}")

    def inject(self, mapping: TensorMapping, result: TensorResult) -> None:
        layout = classify(mapping)
        if layout.pivot_index is not None and layout.pivot_index == layout.value_index:
            raise InvalidMappingError(f"Conflicting pivot and value indices in {mapping.label}")
        for entry in result.entries:
            if len(entry.key) != layout.width:
                raise InjectionError(
                    f"Invalid key {entry.key} in {mapping.label}, expected {layout.width} item(s)"
                )
            if layout.is_projected and not is_almost(entry.value, 1):
                raise NonIndicatorValueError(mapping.label, entry.value)

        if not layout.column_indices and not layout.is_wide:
            self._inject_scalar(mapping.label, layout, result.entries)
            return

        groups = self.snapshot.read_columns([box.range for box in mapping.key_boxes])
        key_cols = {ix: _slim(groups[ix]) for ix in layout.column_indices}
        height = common_height(list(key_cols.values())) if key_cols else 1
        rows = _row_index(layout.width, key_cols, height)

        if layout.is_wide:
            offsets = _pivot_offsets(pivot_row(groups[layout.pivot_index]))
        else:
            offsets = None

        default = _default(layout)
        written: dict[tuple[int, int], Value] = {}
        new_rows: list[list[KeyItem]] = []
        for entry in result.entries:
            partial = _partial_key(layout, entry.key)
            encoded = encode_key(partial)
            i = rows.get(encoded)
            if i is None:
                i = height + len(new_rows)
                rows[encoded] = i
                new_rows.append(partial)

            j = 0
            if offsets is not None:
                j = offsets.get(encode_item(entry.key[layout.pivot_index]))
                if j is None:
                    raise UnspecifiedPivotValueError(entry.key[layout.pivot_index])

            if written.get((i, j), default) != default:
                raise ConflictingResultEntryError(mapping.label, describe_key(encode_key(entry.key)))
            cell = _cell_value(layout, entry)
            if cell != default:
                written[(i, j)] = cell

        total = height + len(new_rows)
        patches = []
        if total > 0:
            rg = _bounded(layout.value_range, total)
            values = constant_columns(rg, default)
            for (i, j), cell in written.items():
                values[j][i] = cell
            patches.append(ColumnsPatch(range=rg, columns=values))
        if new_rows:
            for ix in layout.column_indices:
                key_rg = mapping.key_boxes[ix].range
                top = (key_rg.top or 1) + height
                patches.append(
                    ColumnsPatch(
                        range=key_rg.with_bounds(top=top, bottom=top + len(new_rows) - 1),
                        columns=[[partial[ix] for partial in new_rows]],
                    )
                )
        self._write(patches)
        logger.info(
            f"Injected {len(result.entries)} entries into {mapping.label} "
            f"({len(new_rows)} new row(s))"
        )

    def _inject_scalar(self, label: str, layout: TensorLayout, entries: list[TensorEntry]) -> None:
        if len(entries) > 1:
            raise InvalidScalarResultError(label, len(entries))
        cell = _cell_value(layout, entries[0]) if entries else _default(layout)
        rg = _bounded(layout.value_range, 1)
        self._write([ColumnsPatch(range=rg, columns=[[cell]])])
        logger.info(f"Injected scalar {label}")

    def _write(self, patches: list[ColumnsPatch]) -> None:
        self.snapshot.update_columns(patches)
        self.patches.extend(patches)


def _slim(cols: Columns) -> Column:
    if len(cols) > 1:
        raise InvalidMappingError(f"Expected a single key column, got {len(cols)}")
    return cols[0] if cols else []


def _default(layout: TensorLayout) -> Value:
    return "" if layout.is_projected else 0


def _bounded(rg: Range, height: int) -> Range:
    top = rg.top or 1
    return rg.with_bounds(top=top, bottom=top + height - 1)


def _cell_value(layout: TensorLayout, entry: TensorEntry) -> Value:
    if layout.is_projected:
        return entry.key[layout.value_index]
    return 0 if is_almost(entry.value, 0) else entry.value


def _partial_key(layout: TensorLayout, key: list[KeyItem]) -> list[KeyItem]:
    """Blank out the key components that are not held in key columns."""
    partial = list(key)
    for ix in (layout.pivot_index, layout.value_index):
        if ix is not None:
            partial[ix] = ""
    return partial


def _row_index(width: int, key_cols: dict[int, Column], height: int) -> dict[EncodedKey, int]:
    rows: dict[EncodedKey, int] = {}
    for i in range(height):
        key: list[Optional[KeyItem]] = [""] * width
        for ix, col in key_cols.items():
            key[ix] = col[i]
        encoded = encode_key(key)
        if encoded in rows:
            raise ConflictingKeyHashError(describe_key(encoded))
        rows[encoded] = i
    return rows


def _pivot_offsets(categories: list[Value]) -> dict[EncodedItem, int]:
    offsets: dict[EncodedItem, int] = {}
    for j, category in enumerate(categories):
        encoded = encode_item(category)
        if encoded in offsets:
            raise DuplicatePivotValueError(category)
        offsets[encoded] = j
    return offsets
