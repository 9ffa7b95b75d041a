"""Column-oriented spreadsheet interface."""

from abc import ABC, abstractmethod

from .models import Columns, ColumnsPatch, Range


class Spreadsheet(ABC):
    """Batched column reads and writes over named sheets.

    Implementations may perform I/O; callers treat every call as one atomic
    batch.
    """

    @abstractmethod
    def active_sheets(self) -> list[str]:
        """Return the names of all sheets in the spreadsheet."""

    @abstractmethod
    def read_columns(self, ranges: list[Range]) -> list[Columns]:
        """
        Read the columns covered by each range.

        The returned list has one element per input range, in the same order.
        Each column is trimmed of trailing empty cells and trailing empty
        columns are dropped.
        """

    @abstractmethod
    def update_columns(self, patches: list[ColumnsPatch]) -> None:
        """
        Write values positionally from each patch's top-left cell.

        Missing source cells are written as ''. The sheet grows as needed.
        """
