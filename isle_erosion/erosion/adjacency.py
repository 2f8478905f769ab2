"""Detection of land cells that border open water."""

from typing import Any, Iterable, List, Optional

from .models import Cell
from .grid import build_cell_map, key_set, neighbors, sort_cells


def identify_erodable_cells(
    land_cells: Iterable[Any],
    path_cells: Optional[Iterable[Any]],
    excluded_cells: Optional[Iterable[Any]] = None,
    in_flight_cells: Optional[Iterable[Any]] = None,
) -> List[Cell]:
    """
    Find the land cells that may erode this cycle.

    A cell is erodable when it is not on the path, not currently selected by
    the player, not already flashing, and at least one of its four
    orthogonal neighbors is open water (absent from the land set).

    Args:
        land_cells: All standing cells, path cells included
        path_cells: Protected path cells
        excluded_cells: Cells the player currently has selected
        in_flight_cells: Cells already flashing ahead of removal

    Returns:
        Erodable cells sorted by (y, x)
    """
    land = build_cell_map(land_cells)
    protected = key_set(path_cells) | key_set(excluded_cells) | key_set(in_flight_cells)

    erodable = [
        cell for key, cell in land.items()
        if key not in protected and any(n not in land for n in neighbors(key))
    ]
    return sort_cells(erodable)
