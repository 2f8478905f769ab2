"""Coordinate helpers shared by erosion analysis and island shaping."""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from .models import Cell, Coord

logger = logging.getLogger(__name__)


# Orthogonal neighbor offsets: up, right, down, left
DIRECTIONS: Dict[str, Coord] = {
    "up": (0, -1),
    "right": (1, 0),
    "down": (0, 1),
    "left": (-1, 0),
}

_DIRECTION_BY_DELTA: Dict[Coord, str] = {delta: name for name, delta in DIRECTIONS.items()}


def to_key(item: Any) -> Coord:
    """Coordinate of a Cell, an (x, y) tuple, or a mapping with 'x' and 'y'."""
    if isinstance(item, Cell):
        return item.key
    if isinstance(item, Mapping):
        return (int(item["x"]), int(item["y"]))
    x, y = item
    return (int(x), int(y))


def to_cell(item: Any) -> Cell:
    """Coerce a Cell, (x, y) tuple or cell-like mapping into a Cell."""
    if isinstance(item, Cell):
        return item
    if isinstance(item, Mapping):
        return Cell(**item)
    x, y = item
    return Cell(x=x, y=y)


def build_cell_map(cells: Iterable[Any]) -> Dict[Coord, Cell]:
    """Map each coordinate to its cell. The first occurrence of a coordinate wins."""
    cell_map: Dict[Coord, Cell] = {}
    for item in cells:
        cell = to_cell(item)
        cell_map.setdefault(cell.key, cell)
    return cell_map


def key_set(cells: Optional[Iterable[Any]]) -> Set[Coord]:
    """
    Build a coordinate set from any collection of cells.

    Accepts None, a mapping keyed by coordinates, or an iterable of cells,
    tuples or cell-like mappings.
    """
    if cells is None:
        return set()
    if isinstance(cells, Mapping):
        return {to_key(key) for key in cells.keys()}
    return {to_key(item) for item in cells}


def neighbors(key: Coord) -> List[Coord]:
    """The four orthogonal neighbors of a coordinate, in up/right/down/left order."""
    x, y = key
    return [(x + dx, y + dy) for dx, dy in DIRECTIONS.values()]


def direction_between(a: Any, b: Any) -> Optional[str]:
    """
    Direction name of the step from a to b.

    Returns None (and logs a warning) when the cells are not orthogonally
    adjacent.
    """
    ax, ay = to_key(a)
    bx, by = to_key(b)
    direction = _DIRECTION_BY_DELTA.get((bx - ax, by - ay))
    if direction is None:
        logger.warning(f"No direction maps ({ax},{ay}) -> ({bx},{by}); cells are not adjacent")
    return direction


def sort_cells(cells: Iterable[Cell]) -> List[Cell]:
    """Sort cells in reading order, by (y, x)."""
    return sorted(cells, key=lambda cell: (cell.y, cell.x))


def has_three_adjacent_edges(x: int, y: int, path_keys: Set[Coord]) -> bool:
    """True if exactly three of the cell's orthogonal neighbors are path cells."""
    return sum(1 for key in neighbors((x, y)) if key in path_keys) == 3


def is_cell_congested(x: int, y: int, path_keys: Set[Coord]) -> bool:
    """True if the cell sits between two path cells on opposite sides."""
    horizontal = (x - 1, y) in path_keys and (x + 1, y) in path_keys
    vertical = (x, y - 1) in path_keys and (x, y + 1) in path_keys
    return horizontal or vertical


def center_offset(grid_size: int) -> int:
    """Offset between origin-centered path coordinates and a square view grid."""
    return grid_size // 2


def normalize_selection(cells: Iterable[Any], offset: Coord = (0, 0)) -> List[Cell]:
    """
    Translate player-selected cells from view coordinates into path coordinates.

    The view grid places the path origin at `offset`, so a view cell (vx, vy)
    corresponds to the path cell (vx - ox, vy - oy).
    """
    ox, oy = offset
    return [to_cell(item).translate(-ox, -oy) for item in cells]


def to_view_coordinates(cells: Iterable[Any], offset: Coord = (0, 0)) -> List[Cell]:
    """Inverse of normalize_selection."""
    ox, oy = offset
    return [to_cell(item).translate(ox, oy) for item in cells]
