"""
Initial shaping of a freshly generated island.

A newly grown island is a blocky halo around the path. Before play starts it
is pre-eroded with the same adjacency and pairing rules used during live
erosion, and its outer ring can be cut into a jagged coastline.
"""

import math
import random
from typing import Any, Iterable, List, Optional

from .models import Cell
from .adjacency import identify_erodable_cells
from .grid import build_cell_map, key_set, to_cell
from .selection import select_cells_to_erode


# Default share of the island removed by the shaping pass
DEFAULT_INITIAL_EROSION = 0.25

# Run lengths for the outer ring pattern (inclusive)
LAYER3_REMOVE_RUN = (4, 8)
LAYER3_KEEP_RUN = (1, 4)


def apply_initial_erosion(
    island_cells: Iterable[Any],
    path_cells: Iterable[Any],
    percentage: float = DEFAULT_INITIAL_EROSION,
    rng: Optional[random.Random] = None,
) -> List[Cell]:
    """
    Pre-erode an island so it does not start out perfectly blocky.

    Erosion cascades inward: erodable cells are recomputed against the
    shrinking island before every batch, and each batch takes at most half
    of the quota still outstanding.

    Args:
        island_cells: All island cells, path cells included
        path_cells: Path cells, never removed
        percentage: Share of the island to remove
        rng: Random source

    Returns:
        The surviving cells, in their original order
    """
    remaining = build_cell_map(island_cells)

    if len(remaining) <= 4:
        return list(remaining.values())

    target = math.ceil(len(remaining) * percentage)
    path_keys = key_set(path_cells)
    removed = 0

    while removed < target and remaining:
        erodable = identify_erodable_cells(remaining.values(), path_keys)
        if not erodable:
            # Island consumed down to the path
            break

        batch_size = min(len(erodable), math.ceil((target - removed) / 2))
        for cell in select_cells_to_erode(erodable, batch_size, rng=rng):
            del remaining[cell.key]
        removed += batch_size

    return list(remaining.values())


def arrange_clockwise(start_cell: Any, cells: Iterable[Any]) -> List[Cell]:
    """
    Order cells by angle around start_cell, beginning with start_cell itself.

    Angles grow clockwise on screen because y points down.
    """
    start = to_cell(start_cell)
    others = [cell for cell in (to_cell(c) for c in cells) if cell.key != start.key]
    others.sort(key=lambda cell: math.atan2(cell.y - start.y, cell.x - start.x))
    return [start] + others


def apply_layer3_removal_pattern(
    layer3_cells: Iterable[Any],
    rng: Optional[random.Random] = None,
) -> List[Cell]:
    """
    Cut the outermost ring into an irregular coastline.

    Walks the ring clockwise from the cell nearest the origin, alternately
    dropping a run of 4-8 cells and keeping a run of 1-4 cells.

    Returns:
        The cells that are kept
    """
    cells = [to_cell(c) for c in layer3_cells]
    if not cells:
        return []

    rng = rng or random
    start = min(cells, key=lambda cell: math.hypot(cell.x, cell.y))
    ordered = arrange_clockwise(start, cells)

    kept: List[Cell] = []
    removing = True
    run_left = rng.randint(*LAYER3_REMOVE_RUN)

    for cell in ordered:
        if not removing:
            kept.append(cell)
        run_left -= 1
        if run_left == 0:
            removing = not removing
            run_left = rng.randint(*(LAYER3_REMOVE_RUN if removing else LAYER3_KEEP_RUN))

    return kept
