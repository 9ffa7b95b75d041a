"""Classification of tensor mappings by spreadsheet layout."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..errors import InvalidMappingError
from ..sheets.models import Range
from .models import KeyBoxKind, TensorMapping


class LayoutKind(str, Enum):
    """How a tensor's keys and values are laid out."""

    SLIM_UNPROJECTED = "slim_unprojected"
    SLIM_PROJECTED = "slim_projected"
    WIDE_UNPROJECTED = "wide_unprojected"
    WIDE_PROJECTED = "wide_projected"


@dataclass(frozen=True)
class TensorLayout:
    """Positions of the pivot and projected axes of one tensor mapping."""

    kind: LayoutKind
    width: int
    pivot_index: Optional[int]
    value_index: Optional[int]
    value_range: Range
    column_indices: tuple[int, ...]

    @property
    def is_wide(self) -> bool:
        return self.pivot_index is not None

    @property
    def is_projected(self) -> bool:
        return self.value_index is not None


def classify(mapping: TensorMapping) -> TensorLayout:
    """
    Find the pivot (row box) and projected (value box) axes of a mapping.

    Raises:
        InvalidMappingError: If the key boxes are inconsistent with the
            presence of the mapping's value range
    """
    pivot_ix: Optional[int] = None
    value_ix: Optional[int] = None
    column_ixs = []
    for ix, box in enumerate(mapping.key_boxes):
        if box.kind == KeyBoxKind.ROW:
            if pivot_ix is not None:
                raise InvalidMappingError(f"Multi-pivot tensor {mapping.label}")
            pivot_ix = ix
        elif box.kind == KeyBoxKind.VALUE:
            if value_ix is not None:
                raise InvalidMappingError(f"Multi-value tensor {mapping.label}")
            value_ix = ix
        else:
            column_ixs.append(ix)

    if value_ix is None:
        if mapping.value_range is None:
            raise InvalidMappingError(f"Missing value range for {mapping.label}")
        value_range = mapping.value_range
    else:
        if mapping.value_range is not None:
            raise InvalidMappingError(f"Unexpected value range for projected {mapping.label}")
        value_range = mapping.key_boxes[value_ix].range

    if pivot_ix is None:
        kind = LayoutKind.SLIM_UNPROJECTED if value_ix is None else LayoutKind.SLIM_PROJECTED
    else:
        kind = LayoutKind.WIDE_UNPROJECTED if value_ix is None else LayoutKind.WIDE_PROJECTED

    return TensorLayout(
        kind=kind,
        width=len(mapping.key_boxes),
        pivot_index=pivot_ix,
        value_index=value_ix,
        value_range=value_range,
        column_indices=tuple(column_ixs),
    )
