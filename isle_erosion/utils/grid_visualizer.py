"""Plain-text rendering of an island."""

from typing import Any, Iterable, Optional

from ..erosion.grid import build_cell_map, key_set


LAND = '#'
FLASHING = '*'
WATER = '.'


def render_island(
    land_cells: Iterable[Any],
    path_cells: Optional[Iterable[Any]] = None,
    flashing_cells: Optional[Iterable[Any]] = None,
) -> str:
    """
    Render the island to a string grid.

    Path cells show their letter (or '@' without one), other land shows '#',
    flashing cells show '*' and water shows '.'.
    """
    land = build_cell_map(land_cells)
    path = build_cell_map(path_cells or [])
    flashing = key_set(flashing_cells)

    standing = list(land)
    if not standing:
        return ""

    min_x = min(x for x, _ in standing)
    max_x = max(x for x, _ in standing)
    min_y = min(y for _, y in standing)
    max_y = max(y for _, y in standing)

    def symbol(key) -> str:
        if key not in land:
            return WATER
        if key in flashing:
            return FLASHING
        if key in path:
            return path[key].letter or '@'
        return LAND

    lines = [
        ''.join(symbol((x, y)) for x in range(min_x, max_x + 1))
        for y in range(min_y, max_y + 1)
    ]
    return '\n'.join(lines)
