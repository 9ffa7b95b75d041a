"""Data models for input mappings.

Mappings must be JSON-serializable: they are computed once per (outline,
tables) pair and may be cached by callers between extraction and injection.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..sheets.models import Range


class KeyBoxKind(str, Enum):
    """Where one tensor axis gets its keys from."""

    COLUMN = "column"  # Slim column, one key per row
    ROW = "row"  # Pivot row of a wide block, one key per column
    VALUE = "value"  # The tensor's own values double as keys (projection)


class KeyBox(BaseModel):
    """Range supplying one axis's keys."""

    model_config = ConfigDict(frozen=True)

    kind: KeyBoxKind
    range: Range


class TensorMapping(BaseModel):
    """Location of a parameter's or variable's keys and values."""

    model_config = ConfigDict(frozen=True)

    label: str
    key_boxes: list[KeyBox] = Field(default_factory=list)
    value_range: Optional[Range] = None  # Absent for projected indicators

    @property
    def is_projected(self) -> bool:
        return self.value_range is None


class DimensionMapping(BaseModel):
    """Ranges holding a dimension's items."""

    model_config = ConfigDict(frozen=True)

    label: str
    is_numeric: bool = False
    item_ranges: list[Range] = Field(default_factory=list)


class InputMapping(BaseModel):
    """Associates model data with table ranges.

    The mapping may be partial: variables absent from the sheet are omitted.
    """

    model_config = ConfigDict(frozen=True)

    dimensions: list[DimensionMapping] = Field(default_factory=list)
    parameters: list[TensorMapping] = Field(default_factory=list)
    variables: list[TensorMapping] = Field(default_factory=list)
