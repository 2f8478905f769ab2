"""
Selection of which erodable cells go in a single erosion step.

Pure random single-cell removal reads as noise on screen. Taking adjacent
pairs produces bites that look like a coastline washing away, so about half
of the selections greedily take pairs before filling with singles. Pairs in
outer layers go first, so the grown rings wash away from the outside in.
"""

import random
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, TypeVar

from .models import Cell, CellPair, Coord
from .grid import build_cell_map, direction_between, neighbors


# Chance that a selection takes pairs before singles
PAIR_PRIORITY_CHANCE = 0.5

T = TypeVar("T")


def shuffle_items(items: Iterable[T], rng: Optional[random.Random] = None) -> List[T]:
    """Return a shuffled copy of items (Fisher-Yates via random.shuffle)."""
    shuffled = list(items)
    (rng or random).shuffle(shuffled)
    return shuffled


def find_pairs(cells: Iterable[Any]) -> List[CellPair]:
    """
    Find every unordered pair of orthogonally adjacent cells.

    Each pair appears once, stored with its lower coordinate first.
    """
    cell_map = build_cell_map(cells)
    pairs: List[CellPair] = []
    seen: Set[tuple] = set()

    for key, cell in cell_map.items():
        for adjacent in neighbors(key):
            if adjacent not in cell_map:
                continue
            pair_id = (min(key, adjacent), max(key, adjacent))
            if pair_id in seen:
                continue
            seen.add(pair_id)

            first, second = cell_map[pair_id[0]], cell_map[pair_id[1]]
            direction = direction_between(first, second)
            if direction is None:
                continue
            orientation = 'H' if direction in ("left", "right") else 'V'
            pairs.append(CellPair(first, second, orientation))

    return pairs


def pair_layer_score(pair: CellPair) -> float:
    """Erosion priority of a pair: higher scores sit further out."""
    first = pair.first.layer or 1
    second = pair.second.layer or 1

    if first == 3 and second == 3:
        return 3
    if first == 3 or second == 3:
        return 2.5
    if first == 2 and second == 2:
        return 2
    if first == 2 or second == 2:
        return 1.5
    return 1


def prioritize_pairs_by_layer(
    pairs: Iterable[CellPair],
    rng: Optional[random.Random] = None,
) -> List[CellPair]:
    """Order pairs outer band first, shuffled within each band."""
    bands: Dict[float, List[CellPair]] = {}
    for pair in pairs:
        bands.setdefault(pair_layer_score(pair), []).append(pair)

    ordered: List[CellPair] = []
    for score in sorted(bands, reverse=True):
        ordered.extend(shuffle_items(bands[score], rng))
    return ordered


def select_cells_to_erode(
    candidates: Sequence[Any],
    count: int,
    prioritize_pairs: Optional[bool] = None,
    rng: Optional[random.Random] = None,
) -> List[Cell]:
    """
    Choose up to `count` cells to erode, biased toward adjacent pairs.

    Pairs are taken outer layer first (see prioritize_pairs_by_layer);
    cells without a layer all fall in the innermost band.

    Args:
        candidates: Erodable cells
        count: Number of cells to remove (>= 1)
        prioritize_pairs: Force (True) or skip (False) the pair pass.
            None flips a coin with PAIR_PRIORITY_CHANCE.
        rng: Random source, defaults to the module-level generator

    Returns:
        Exactly min(count, len(candidates)) distinct cells

    Raises:
        ValueError: If count is less than 1
    """
    if count < 1:
        raise ValueError(f"Erosion count must be at least 1, got {count}")

    rng = rng or random
    cells = list(build_cell_map(candidates).values())

    if len(cells) <= count:
        return cells

    selected: List[Cell] = []
    used: Set[Coord] = set()
    remaining_to_select = count

    if prioritize_pairs is None:
        prioritize_pairs = rng.random() < PAIR_PRIORITY_CHANCE

    if prioritize_pairs:
        pairs = prioritize_pairs_by_layer(find_pairs(cells), rng)
        max_pairs = min(len(pairs), count // 2)
        taken = 0

        for pair in pairs:
            if taken >= max_pairs or remaining_to_select < 2:
                break
            # Overlapping pairs would select a cell twice
            if pair.first.key in used or pair.second.key in used:
                continue

            selected.extend(pair.cells)
            used.update((pair.first.key, pair.second.key))
            remaining_to_select -= 2
            taken += 1

    if remaining_to_select > 0:
        singles = shuffle_items((c for c in cells if c.key not in used), rng)
        selected.extend(singles[:remaining_to_select])

    return selected
