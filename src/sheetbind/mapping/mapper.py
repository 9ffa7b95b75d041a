"""Binding of model outlines to detected tables."""

import logging
from typing import Optional

from ..errors import (
    ConflictingQualifierError,
    DuplicateTensorError,
    HeaderCollisionError,
    MissingBindingError,
    MissingParameterError,
    ReusedBindingHeaderError,
    UnderqualifiedTensorError,
    UnknownDimensionError,
    WideDimensionBlockError,
)
from ..outline.models import Outline, SourceBinding, TensorOutline
from ..sheets.models import Range
from ..tables.headers import Header, new_header
from ..tables.models import BlockKind, Table
from .models import DimensionMapping, InputMapping, KeyBox, KeyBoxKind, TensorMapping

logger = logging.getLogger(__name__)


def compute_input_mapping(tables: list[Table], outline: Outline) -> InputMapping:
    """
    Associate model data with table ranges.

    Every non-derived parameter must be present in exactly one table.
    Variables missing from the tables are left out of the mapping. Only
    parameter bindings and dimension blocks contribute dimension item ranges:
    variable ranges hold solver output, not items.

    Args:
        tables: Tables detected in the spreadsheet, in any order
        outline: The model's dimensions, parameters and variables

    Returns:
        The input mapping, independent of the order of `tables`
    """
    validate_no_header_collisions(outline)

    ordered = sorted(tables, key=lambda t: t.sort_key())
    registry = ItemRangeRegistry()

    parameters: list[TensorMapping] = []
    for tensor in outline.parameters:
        if tensor.is_derived:
            continue
        mapping = _tensor_mapping(ordered, tensor, registry)
        if mapping is None:
            raise MissingParameterError(tensor.label)
        parameters.append(mapping)

    variables: list[TensorMapping] = []
    for tensor in outline.variables:
        mapping = _tensor_mapping(ordered, tensor)
        if mapping is None:
            logger.warning(f"Variable {tensor.label} not found in any table, skipping")
            continue
        variables.append(mapping)

    for dim in outline.dimensions:
        header = new_header(dim.label)
        for table in ordered:
            block = table.blocks.get(header)
            if block is None:
                continue
            if block.kind != BlockKind.SLIM:
                raise WideDimensionBlockError(dim.label)
            registry.add_range(dim.label, block.body_range)

    mapping = InputMapping(
        dimensions=[
            DimensionMapping(
                label=d.label,
                is_numeric=d.is_numeric,
                item_ranges=registry.ranges(d.label),
            )
            for d in outline.dimensions
        ],
        parameters=parameters,
        variables=variables,
    )
    logger.info(
        f"Mapped {len(mapping.dimensions)} dimension(s), {len(parameters)} parameter(s) "
        f"and {len(variables)} of {len(outline.variables)} variable(s)"
    )
    return mapping


def _tensor_mapping(
    tables: list[Table],
    tensor: TensorOutline,
    registry: Optional["ItemRangeRegistry"] = None,
) -> Optional[TensorMapping]:
    mapping = None
    for table in tables:
        builder = TensorMappingBuilder.if_compatible(table, tensor, registry)
        if builder is None:
            continue
        if mapping is not None:
            raise DuplicateTensorError(tensor.label)
        mapping = builder.build()
    return mapping


class TensorMappingBuilder:
    """Resolves each binding of one tensor to a key box of its table."""

    def __init__(
        self,
        tensor: TensorOutline,
        value_range: Range,
        key_boxes: dict[Header, KeyBox],
        registry: Optional["ItemRangeRegistry"] = None,
    ):
        self.tensor = tensor
        self.value_range = value_range
        self.key_boxes = key_boxes
        self.registry = registry
        self.is_projected = False
        self.used_headers: set[Header] = set()

    @classmethod
    def if_compatible(
        cls,
        table: Table,
        tensor: TensorOutline,
        registry: Optional["ItemRangeRegistry"] = None,
    ) -> Optional["TensorMappingBuilder"]:
        """Return a builder if the table holds the tensor's block."""
        block = table.blocks.get(new_header(tensor.label))
        if block is None:
            return None
        key_boxes = {block.header: KeyBox(kind=KeyBoxKind.VALUE, range=block.body_range)}
        if block.kind == BlockKind.WIDE:
            key_boxes[block.nested_header] = KeyBox(kind=KeyBoxKind.ROW, range=block.head_range)
        for slim in table.slim_blocks():
            if slim.header != block.header:
                key_boxes[slim.header] = KeyBox(kind=KeyBoxKind.COLUMN, range=slim.body_range)
        return cls(tensor, block.body_range, key_boxes, registry)

    def build(self) -> TensorMapping:
        key_boxes = [self._binding_key_box(b) for b in self.tensor.bindings]
        logger.debug(
            f"Bound {self.tensor.label} to {[b.kind.value for b in key_boxes]}"
            + (" (projected)" if self.is_projected else "")
        )
        return TensorMapping(
            label=self.tensor.label,
            key_boxes=key_boxes,
            value_range=None if self.is_projected else self.value_range,
        )

    def _binding_key_box(self, binding: SourceBinding) -> KeyBox:
        label = self.tensor.label
        dim, qual = binding.dimension_label, binding.qualifier
        if dim is None and not qual:
            raise UnderqualifiedTensorError(label)

        header = new_header(qual) if qual else None
        box = self.key_boxes.get(header) if header else None
        if box is None and dim is not None:
            header = new_header(dim)
            box = self.key_boxes.get(header)

        if box is not None:
            if header in self.used_headers:
                raise ReusedBindingHeaderError(label, header)
            self.used_headers.add(header)
        else:
            # A single missing key can be read from the values of an indicator.
            if self.is_projected or not self.tensor.is_indicator:
                raise MissingBindingError(label, header)
            self.is_projected = True
            box = KeyBox(kind=KeyBoxKind.VALUE, range=self.value_range)

        if dim is not None and self.registry is not None:
            self.registry.add_range(dim, box.range)
        return box


class ItemRangeRegistry:
    """Ranges holding each dimension's items, deduplicated by address."""

    def __init__(self):
        self._by_dimension: dict[str, dict[str, Range]] = {}

    def add_range(self, dimension: str, rg: Range) -> None:
        self._by_dimension.setdefault(dimension, {})[rg.a1] = rg

    def ranges(self, dimension: str) -> list[Range]:
        ranges = self._by_dimension.get(dimension)
        if ranges is None:
            raise UnknownDimensionError(dimension)
        return list(ranges.values())


def validate_no_header_collisions(outline: Outline) -> None:
    """
    Check that labels and qualifiers map to distinct headers.

    Raises:
        HeaderCollisionError: If two labels share a header
        ConflictingQualifierError: If a qualifier matches a label's header or
            another qualifier of the same tensor
    """
    by_header: dict[Header, str] = {}
    labels = (
        [d.label for d in outline.dimensions]
        + [p.label for p in outline.parameters]
        + [v.label for v in outline.variables]
    )
    for label in labels:
        header = new_header(label)
        previous = by_header.get(header)
        if previous is not None:
            raise HeaderCollisionError(header, previous, label)
        by_header[header] = label

    for tensor in outline.parameters + outline.variables:
        qualifiers: set[Header] = set()
        for binding in tensor.bindings:
            if not binding.qualifier:
                continue
            header = new_header(binding.qualifier)
            if header in qualifiers or header in by_header:
                raise ConflictingQualifierError(tensor.label, binding.qualifier)
            qualifiers.add(header)
