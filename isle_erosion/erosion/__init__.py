"""Erosion analysis for island cells."""

from .models import Cell, CellPair, Coord
from .grid import (
    DIRECTIONS,
    to_key,
    to_cell,
    build_cell_map,
    key_set,
    neighbors,
    direction_between,
    sort_cells,
    has_three_adjacent_edges,
    is_cell_congested,
    center_offset,
    normalize_selection,
    to_view_coordinates,
)
from .adjacency import identify_erodable_cells
from .selection import (
    PAIR_PRIORITY_CHANCE,
    find_pairs,
    pair_layer_score,
    prioritize_pairs_by_layer,
    select_cells_to_erode,
    shuffle_items,
)
from .shaping import (
    DEFAULT_INITIAL_EROSION,
    apply_initial_erosion,
    arrange_clockwise,
    apply_layer3_removal_pattern,
)

__all__ = [
    # Models
    "Cell",
    "CellPair",
    "Coord",
    # Coordinate helpers
    "DIRECTIONS",
    "to_key",
    "to_cell",
    "build_cell_map",
    "key_set",
    "neighbors",
    "direction_between",
    "sort_cells",
    "has_three_adjacent_edges",
    "is_cell_congested",
    "center_offset",
    "normalize_selection",
    "to_view_coordinates",
    # Analysis
    "identify_erodable_cells",
    # Selection
    "PAIR_PRIORITY_CHANCE",
    "find_pairs",
    "select_cells_to_erode",
    "shuffle_items",
    "pair_layer_score",
    "prioritize_pairs_by_layer",
    # Shaping
    "DEFAULT_INITIAL_EROSION",
    "apply_initial_erosion",
    "arrange_clockwise",
    "apply_layer3_removal_pattern",
]
