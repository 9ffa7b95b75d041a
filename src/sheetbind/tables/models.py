"""Data models for detected tables."""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from ..sheets.models import Range
from .headers import Header


class BlockKind(str, Enum):
    """Layout of a block under one header."""

    SLIM = "slim"  # Single column, values start right below the header
    WIDE = "wide"  # Pivot row of nested categories below a `name/nested` header


class SlimBlock(BaseModel):
    """A single column of values."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[BlockKind.SLIM] = BlockKind.SLIM
    header: Header
    body_range: Range


class WideBlock(BaseModel):
    """Columns of values under a row of category labels.

    Can only be followed by other wide blocks within a table since its body
    starts one row lower than a slim block's with the same header row.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal[BlockKind.WIDE] = BlockKind.WIDE
    header: Header
    nested_header: Header
    head_range: Range
    body_range: Range


TableBlock = Annotated[Union[SlimBlock, WideBlock], Field(discriminator="kind")]


class Table(BaseModel):
    """Blocks detected in one contiguous run of non-empty columns."""

    blocks: dict[Header, TableBlock] = Field(default_factory=dict)

    @property
    def body_top(self) -> int:
        """Top row shared by every block's values."""
        block = next(iter(self.blocks.values()))
        return block.body_range.top or 1

    @property
    def sheet(self) -> str:
        return next(iter(self.blocks.values())).body_range.sheet

    @property
    def left(self) -> int:
        return next(iter(self.blocks.values())).body_range.left or 1

    def slim_blocks(self) -> list[SlimBlock]:
        return [b for b in self.blocks.values() if b.kind == BlockKind.SLIM]

    def sort_key(self) -> tuple[str, int, int]:
        return (self.sheet, self.body_top, self.left)
