"""Model outlines consumed from, and payloads exchanged with, the solve service.

The service speaks camelCase JSON; every model accepts both camelCase and
snake_case field names and serializes with camelCase aliases.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EPSILON = 1e-6

KeyItem = Union[str, int, float]
Bound = Union[float, str]


def is_almost(arg: float, target: float) -> bool:
    """Return whether a number is within epsilon of a target."""
    return abs(arg - target) < EPSILON


class _ServiceModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DimensionOutline(_ServiceModel):
    """A dimension declared by the model."""

    label: str
    is_numeric: bool = False


class SourceBinding(_ServiceModel):
    """Association of one tensor axis with a dimension and/or a qualifier."""

    dimension_label: Optional[str] = None
    qualifier: Optional[str] = None


class TensorOutline(_ServiceModel):
    """A parameter or variable declared by the model."""

    label: str
    bindings: list[SourceBinding] = Field(default_factory=list)
    is_integral: bool = False
    lower_bound: Bound = "Dynamic"
    upper_bound: Bound = "Dynamic"
    derivation: Optional[Any] = None

    @property
    def is_indicator(self) -> bool:
        """Integral tensors bounded by exactly 0 and 1."""
        return self.is_integral and _is_number(self.lower_bound, 0) and _is_number(self.upper_bound, 1)

    @property
    def is_derived(self) -> bool:
        return self.derivation is not None


class Outline(_ServiceModel):
    """Schema of a model's dimensions, parameters and variables."""

    dimensions: list[DimensionOutline] = Field(default_factory=list)
    parameters: list[TensorOutline] = Field(default_factory=list)
    variables: list[TensorOutline] = Field(default_factory=list)


class TensorEntry(_ServiceModel):
    """One non-default cell of a sparse tensor."""

    key: list[KeyItem] = Field(default_factory=list)
    value: float


class TensorResult(_ServiceModel):
    """Solver output for one variable."""

    label: str
    entries: list[TensorEntry] = Field(default_factory=list)


class TensorInput(_ServiceModel):
    """Sparse entries of a parameter or pinned variable."""

    label: str
    entries: list[TensorEntry] = Field(default_factory=list)


class DimensionInput(_ServiceModel):
    label: str
    items: list[KeyItem] = Field(default_factory=list)


class InputValues(_ServiceModel):
    """Inputs extracted from a spreadsheet, shaped like a solve request."""

    dimensions: list[DimensionInput] = Field(default_factory=list)
    parameters: list[TensorInput] = Field(default_factory=list)
    pinned_variables: list[TensorInput] = Field(default_factory=list)


def _is_number(bound: Bound, target: float) -> bool:
    return not isinstance(bound, str) and bound == target
