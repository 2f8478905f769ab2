"""Data models for island cells."""

from typing import Optional, Tuple, NamedTuple
from pydantic import BaseModel, ConfigDict, Field


# Integer (x, y) grid coordinate
Coord = Tuple[int, int]


class Cell(BaseModel):
    """
    A single island cell.

    Identity is the (x, y) coordinate: two cells with the same coordinate are
    equal regardless of their letter or layer annotations.
    """
    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    letter: Optional[str] = None  # Display payload, opaque to erosion
    layer: Optional[int] = Field(None, ge=1)  # Ring distance, only used for shaping

    @property
    def key(self) -> Coord:
        """The (x, y) coordinate of this cell."""
        return (self.x, self.y)

    def translate(self, dx: int, dy: int) -> "Cell":
        """Return a copy of this cell shifted by (dx, dy)."""
        return self.model_copy(update={"x": self.x + dx, "y": self.y + dy})

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Cell):
            return self.key == other.key
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.key)


class CellPair(NamedTuple):
    """Two orthogonally adjacent cells, stored in canonical (min, max) order."""
    first: Cell
    second: Cell
    orientation: str  # 'H' or 'V'

    @property
    def id(self) -> Tuple[Coord, Coord]:
        return (self.first.key, self.second.key)

    @property
    def cells(self) -> Tuple[Cell, Cell]:
        return (self.first, self.second)
