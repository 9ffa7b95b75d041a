"""Binding of model outlines to spreadsheet tables."""

from .mapper import (
    ItemRangeRegistry,
    TensorMappingBuilder,
    compute_input_mapping,
    validate_no_header_collisions,
)
from .layout import LayoutKind, TensorLayout, classify
from .models import (
    DimensionMapping,
    InputMapping,
    KeyBox,
    KeyBoxKind,
    TensorMapping,
)

__all__ = [
    "LayoutKind",
    "TensorLayout",
    "classify",
    "ItemRangeRegistry",
    "TensorMappingBuilder",
    "compute_input_mapping",
    "validate_no_header_collisions",
    "DimensionMapping",
    "InputMapping",
    "KeyBox",
    "KeyBoxKind",
    "TensorMapping",
]
