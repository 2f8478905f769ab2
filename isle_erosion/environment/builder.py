"""
Island generation for a phrase.

The phrase is laid out as a snake path starting at (0, 0). Land grows
around the path in rings (layers), the outer ring is cut into a jagged
coastline and the whole island is pre-eroded so play starts from a natural
shape.
"""

import logging
import math
import random
import re
from typing import Dict, List, Optional, Set, Tuple

from ..erosion.models import Cell, Coord
from ..erosion.grid import DIRECTIONS, neighbors
from ..erosion.shaping import apply_initial_erosion, apply_layer3_removal_pattern
from .island import InMemoryIsland
from .models import IslandConfig

logger = logging.getLogger(__name__)


# English letter frequency used for filler letters around the path
LETTER_DISTRIBUTION: Dict[str, int] = {
    "E": 12, "T": 8, "A": 7, "O": 7, "I": 7, "N": 7, "S": 6, "H": 6,
    "R": 6, "D": 4, "L": 4, "C": 3, "U": 3, "M": 2, "W": 2, "F": 2,
    "G": 2, "Y": 2, "P": 2, "B": 1, "V": 1, "K": 1, "J": 1, "Q": 1,
    "X": 1, "Z": 1,
}

_LETTER_POOL: List[str] = [
    letter for letter, weight in LETTER_DISTRIBUTION.items() for _ in range(weight)
]

# After this many path cells, steps near the origin prefer heading outward
OUTWARD_AFTER = 5
OUTWARD_RADIUS = 5


def parse_letters(phrase: str) -> List[str]:
    """Letters and digits of a phrase, uppercased. Spaces and punctuation are dropped."""
    return [ch.upper() for ch in re.findall(r'[A-Za-z0-9]', phrase)]


def random_letter(rng: Optional[random.Random] = None) -> str:
    """Draw a letter weighted by English frequency."""
    return (rng or random).choice(_LETTER_POOL)


def _is_valid_next(
    candidate: Coord,
    current: Coord,
    visited: Set[Coord],
    max_distance: int,
) -> bool:
    if candidate in visited:
        return False
    if abs(candidate[0]) > max_distance or abs(candidate[1]) > max_distance:
        return False
    if abs(candidate[0] - current[0]) + abs(candidate[1] - current[1]) != 1:
        return False
    # Touching an earlier cell would make the path ambiguous to trace
    return not any(
        n in visited and n != current for n in neighbors(candidate)
    )


def _find_next_position(
    path: List[Cell],
    visited: Set[Coord],
    max_distance: int,
    rng: random.Random,
) -> Optional[Coord]:
    x, y = path[-1].key
    directions = list(DIRECTIONS.values())
    distance = math.hypot(x, y)

    if len(path) > OUTWARD_AFTER and distance < OUTWARD_RADIUS:
        outward = [d for d in directions if math.hypot(x + d[0], y + d[1]) > distance]
        inward = [d for d in directions if d not in outward]
        rng.shuffle(outward)
        rng.shuffle(inward)
        directions = outward + inward
    else:
        rng.shuffle(directions)

    for dx, dy in directions:
        candidate = (x + dx, y + dy)
        if _is_valid_next(candidate, (x, y), visited, max_distance):
            return candidate
    return None


def generate_path(
    phrase: str,
    rng: Optional[random.Random] = None,
    max_distance: int = 25,
) -> List[Cell]:
    """
    Lay a phrase out as a snake path starting at the origin.

    Each step moves to an orthogonal neighbor that is unvisited, inside
    `max_distance` of the origin and not touching any earlier path cell.
    If the walk hits a dead end the path is truncated.

    Args:
        phrase: Phrase to spell; only letters and digits are placed
        rng: Random source
        max_distance: Bound on |x| and |y|

    Returns:
        Path cells in phrase order, each carrying its letter

    Raises:
        ValueError: If the phrase has no letters or digits
    """
    letters = parse_letters(phrase)
    if not letters:
        raise ValueError(f"Phrase has no letters to place: {phrase!r}")

    rng = rng or random.Random()
    path = [Cell(x=0, y=0, letter=letters[0])]
    visited: Set[Coord] = {(0, 0)}

    for letter in letters[1:]:
        position = _find_next_position(path, visited, max_distance, rng)
        if position is None:
            logger.warning(
                f"Path reached a dead end after {len(path)} of {len(letters)} letters"
            )
            break
        visited.add(position)
        path.append(Cell(x=position[0], y=position[1], letter=letter))

    return path


def grow_land(
    path: List[Cell],
    layers: int,
    rng: Optional[random.Random] = None,
) -> List[Cell]:
    """
    Surround the path with `layers` rings of land.

    Each non-path cell is tagged with its step distance to the path (its
    layer) and a random filler letter.

    Returns:
        Path cells followed by the grown land cells
    """
    rng = rng or random.Random()
    distances: Dict[Coord, int] = {cell.key: 0 for cell in path}
    frontier: List[Coord] = [cell.key for cell in path]
    grown: List[Cell] = []

    for layer in range(1, layers + 1):
        next_frontier: List[Coord] = []
        for key in frontier:
            for adjacent in neighbors(key):
                if adjacent in distances:
                    continue
                distances[adjacent] = layer
                next_frontier.append(adjacent)
                grown.append(Cell(
                    x=adjacent[0],
                    y=adjacent[1],
                    letter=random_letter(rng),
                    layer=layer,
                ))
        frontier = next_frontier

    return list(path) + grown


def build_island(
    path: List[Cell],
    config: Optional[IslandConfig] = None,
    rng: Optional[random.Random] = None,
) -> List[Cell]:
    """
    Grow and shape the land around a path.

    Args:
        path: Path cells
        config: Island settings
        rng: Random source

    Returns:
        Land cells, path cells included
    """
    config = config or IslandConfig()
    rng = rng or random.Random()

    land = grow_land(path, config.layers, rng)
    logger.debug(f"Grew {len(land) - len(path)} land cells around a {len(path)}-cell path")

    if config.apply_layer3_pattern and config.layers >= 3:
        ring = [cell for cell in land if cell.layer == config.layers]
        kept = {cell.key for cell in apply_layer3_removal_pattern(ring, rng)}
        land = [cell for cell in land if cell.layer != config.layers or cell.key in kept]

    if config.initial_erosion > 0:
        land = apply_initial_erosion(land, path, config.initial_erosion, rng)

    logger.info(f"Built island with {len(land)} cells for a {len(path)}-letter path")
    return land


def create_island(
    phrase: str,
    config: Optional[IslandConfig] = None,
    seed: Optional[int] = None,
    view_offset: Tuple[int, int] = (0, 0),
) -> InMemoryIsland:
    """
    Factory for a playable island spelling `phrase`.

    Args:
        phrase: Phrase to hide in the island
        config: Island settings
        seed: Optional random seed for reproducibility
        view_offset: Where the path origin sits in the player's view grid

    Returns:
        A new InMemoryIsland
    """
    config = config or IslandConfig()
    rng = random.Random(seed)

    path = generate_path(phrase, rng, config.max_distance)
    land = build_island(path, config, rng)
    return InMemoryIsland.create(land, path, view_offset=view_offset)
