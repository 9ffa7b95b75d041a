"""Model outline and solve payload types."""

from .models import (
    EPSILON,
    DimensionInput,
    DimensionOutline,
    InputValues,
    KeyItem,
    Outline,
    SourceBinding,
    TensorEntry,
    TensorInput,
    TensorOutline,
    TensorResult,
    is_almost,
)

__all__ = [
    "EPSILON",
    "DimensionInput",
    "DimensionOutline",
    "InputValues",
    "KeyItem",
    "Outline",
    "SourceBinding",
    "TensorEntry",
    "TensorInput",
    "TensorOutline",
    "TensorResult",
    "is_almost",
]
