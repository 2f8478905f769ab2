"""
The grid collaborator contract and an in-memory island.

The erosion controller never owns the land set. It reads snapshots through
IslandGrid and asks the grid to flash or remove cells.
"""

from typing import Any, Dict, Iterable, List, Protocol, Tuple, runtime_checkable
from pydantic import BaseModel, Field

from ..erosion.models import Cell, Coord
from ..erosion.grid import build_cell_map, key_set, to_cell, to_view_coordinates


@runtime_checkable
class IslandGrid(Protocol):
    """What the erosion controller needs from the grid that renders the island."""

    def get_land_cells(self) -> List[Cell]: ...

    def get_path_cells(self) -> List[Cell]: ...

    def get_selected_cells(self) -> List[Cell]: ...

    def is_round_completed_correctly(self) -> bool: ...

    def start_flashing(self, cells: List[Cell]) -> None: ...

    def stop_flashing(self) -> None: ...

    def remove_cells(self, cells: List[Cell]) -> None: ...


class InMemoryIsland(BaseModel):
    """
    Island grid held in plain Python structures.

    Land and path use path coordinates (origin at the first letter). The
    player's selection is stored in view coordinates, offset by
    `view_offset`, the way the rendered grid reports it.

    Attributes:
        land: Standing cells keyed by coordinate, path cells included
        path: The ordered answer path
        selected: Player-selected cells, in view coordinates
        flashing: Cells currently flashing ahead of removal
        removed: Every cell removed so far, in removal order
        completed: Whether the player has submitted the full path
        is_correct: Whether that submission was correct
    """

    land: Dict[Coord, Cell] = Field(default_factory=dict)
    path: List[Cell] = Field(default_factory=list)
    selected: List[Cell] = Field(default_factory=list)
    flashing: Dict[Coord, Cell] = Field(default_factory=dict)
    removed: List[Cell] = Field(default_factory=list)
    view_offset: Tuple[int, int] = (0, 0)
    completed: bool = False
    is_correct: bool = False

    @classmethod
    def create(
        cls,
        land_cells: Iterable[Any],
        path_cells: Iterable[Any],
        view_offset: Tuple[int, int] = (0, 0),
    ) -> "InMemoryIsland":
        """
        Build an island from land and path cells.

        Path cells are always part of the land, whether or not they were
        listed in land_cells.
        """
        path = [to_cell(c) for c in path_cells]
        land = build_cell_map(land_cells)
        for cell in path:
            land.setdefault(cell.key, cell)
        return cls(land=land, path=path, view_offset=view_offset)

    # --- IslandGrid ---

    def get_land_cells(self) -> List[Cell]:
        return list(self.land.values())

    def get_path_cells(self) -> List[Cell]:
        """Path cells that are still standing."""
        return [cell for cell in self.path if cell.key in self.land]

    def get_selected_cells(self) -> List[Cell]:
        return list(self.selected)

    def is_round_completed_correctly(self) -> bool:
        return self.completed and self.is_correct

    def start_flashing(self, cells: List[Cell]) -> None:
        for cell in cells:
            if cell.key in self.land:
                self.flashing[cell.key] = self.land[cell.key]

    def stop_flashing(self) -> None:
        self.flashing.clear()

    def remove_cells(self, cells: List[Cell]) -> None:
        for cell in cells:
            standing = self.land.pop(cell.key, None)
            self.flashing.pop(cell.key, None)
            if standing is not None:
                self.removed.append(standing)

    # --- Player interaction ---

    def select(self, cells: Iterable[Any], view_coordinates: bool = True) -> None:
        """
        Replace the player's selection.

        Args:
            cells: Cells to select
            view_coordinates: False if `cells` are given in path coordinates
        """
        cells = [to_cell(c) for c in cells]
        if not view_coordinates:
            cells = to_view_coordinates(cells, self.view_offset)
        self.selected = cells

    def clear_selection(self) -> None:
        self.selected = []

    def mark_completed(self, is_correct: bool = True) -> None:
        self.completed = True
        self.is_correct = is_correct

    # --- Queries ---

    @property
    def land_count(self) -> int:
        return len(self.land)

    @property
    def path_intact(self) -> bool:
        """True while every path cell is still standing."""
        return key_set(self.path) <= set(self.land)

    def letters(self) -> str:
        return "".join(cell.letter or "" for cell in self.path)

    def get_state(self) -> Dict:
        """Summary of the island, for logging and reports."""
        return {
            "land": self.land_count,
            "path": len(self.path),
            "path_standing": len(self.get_path_cells()),
            "flashing": len(self.flashing),
            "removed": len(self.removed),
            "completed": self.completed,
            "is_correct": self.is_correct,
        }
