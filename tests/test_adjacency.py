"""Test erodable-cell detection and the coordinate helpers behind it."""

import logging
import random

import pytest

from isle_erosion.erosion import (
    Cell,
    identify_erodable_cells,
    direction_between,
    normalize_selection,
    to_view_coordinates,
    center_offset,
    has_three_adjacent_edges,
    is_cell_congested,
    neighbors,
)


def block(width: int, height: int, x0: int = 0, y0: int = 0):
    """Solid rectangle of land cells."""
    return [Cell(x=x, y=y) for y in range(y0, y0 + height) for x in range(x0, x0 + width)]


def keys(cells):
    return {cell.key for cell in cells}


class TestIdentifyErodableCells:
    """Test which land cells border open water."""

    def test_ring_around_removed_center(self):
        """All eight ring cells of a hollow 3x3 block border water."""
        ring = [cell for cell in block(3, 3, -1, -1) if cell.key != (0, 0)]
        erodable = identify_erodable_cells(ring, [Cell(x=0, y=0)])

        assert len(erodable) == 8
        assert keys(erodable) == keys(ring)

    def test_interior_cell_never_erodable(self):
        """A cell fully surrounded by land is not erodable."""
        erodable = identify_erodable_cells(block(3, 3), [])

        assert (1, 1) not in keys(erodable)
        assert len(erodable) == 8

    def test_path_cells_excluded(self):
        """Path cells are protected even on the coast."""
        land = block(4, 1)
        erodable = identify_erodable_cells(land, [Cell(x=0, y=0), Cell(x=1, y=0)])

        assert keys(erodable) == {(2, 0), (3, 0)}

    def test_selected_cells_excluded(self):
        """Cells the player has selected are protected."""
        erodable = identify_erodable_cells(block(3, 1), [], excluded_cells=[Cell(x=1, y=0)])

        assert keys(erodable) == {(0, 0), (2, 0)}

    def test_flashing_cells_excluded(self):
        """Cells already flashing are not selected again."""
        flashing = {(0, 0): Cell(x=0, y=0)}
        erodable = identify_erodable_cells(block(2, 1), [], in_flight_cells=flashing)

        assert keys(erodable) == {(1, 0)}

    def test_accepts_tuples_and_mappings(self):
        """Cells may be given as tuples or {'x', 'y'} mappings."""
        land = [(0, 0), {"x": 1, "y": 0, "letter": "A"}, (2, 0)]
        erodable = identify_erodable_cells(land, [(1, 0)])

        assert keys(erodable) == {(0, 0), (2, 0)}

    def test_keeps_cell_annotations(self):
        """Returned cells carry their letter and layer."""
        land = [Cell(x=0, y=0, letter="Q", layer=3)]
        erodable = identify_erodable_cells(land, [])

        assert erodable[0].letter == "Q"
        assert erodable[0].layer == 3

    def test_empty_land(self):
        """No land, nothing to erode."""
        assert identify_erodable_cells([], []) == []

    def test_sorted_and_idempotent(self):
        """Output is ordered by (y, x) and stable across calls."""
        land = block(5, 4)
        random.Random(3).shuffle(land)

        first = identify_erodable_cells(land, [Cell(x=2, y=0)])
        second = identify_erodable_cells(land, [Cell(x=2, y=0)])

        assert [c.key for c in first] == [c.key for c in second]
        assert [(c.y, c.x) for c in first] == sorted((c.y, c.x) for c in first)

    def test_random_islands_property(self):
        """Only non-path land with a water neighbor is returned, and all of it."""
        rng = random.Random(11)
        for _ in range(50):
            land = [cell for cell in block(8, 8) if rng.random() < 0.7]
            path = [cell for cell in land if rng.random() < 0.1]
            land_keys = keys(land)
            path_keys = keys(path)

            erodable = keys(identify_erodable_cells(land, path))

            for key in land_keys - path_keys:
                borders_water = any(n not in land_keys for n in neighbors(key))
                assert (key in erodable) == borders_water
            assert erodable <= land_keys - path_keys


class TestCellModel:
    """Test cell identity."""

    def test_equality_by_coordinate(self):
        """Letter and layer do not affect identity."""
        assert Cell(x=1, y=2, letter="A") == Cell(x=1, y=2, letter="B", layer=2)
        assert len({Cell(x=1, y=2, letter="A"), Cell(x=1, y=2)}) == 1

    def test_cells_are_immutable(self):
        """Cells cannot be modified in place."""
        cell = Cell(x=0, y=0)
        with pytest.raises(Exception):
            cell.x = 5

    def test_layer_must_be_positive(self):
        """Layers start at 1."""
        with pytest.raises(ValueError):
            Cell(x=0, y=0, layer=0)


class TestGridHelpers:
    """Test direction lookups, selection offsets and path-shape checks."""

    def test_direction_between_neighbors(self):
        """Orthogonal steps map to direction names."""
        assert direction_between((0, 0), (0, -1)) == "up"
        assert direction_between((0, 0), (1, 0)) == "right"
        assert direction_between((0, 0), (0, 1)) == "down"
        assert direction_between((0, 0), (-1, 0)) == "left"

    def test_unmapped_direction_falls_back(self, caplog):
        """Non-adjacent cells give None and a warning instead of an error."""
        with caplog.at_level(logging.WARNING):
            assert direction_between((0, 0), (1, 1)) is None
            assert direction_between((0, 0), (0, 0)) is None
        assert "not adjacent" in caplog.text

    def test_center_offset(self):
        """A 51x51 view grid centers the path origin at 25."""
        assert center_offset(51) == 25
        assert center_offset(8) == 4

    def test_normalize_selection(self):
        """View coordinates shift back by the offset."""
        selected = [Cell(x=25, y=25, letter="A"), Cell(x=26, y=24)]
        normalized = normalize_selection(selected, (25, 25))

        assert [c.key for c in normalized] == [(0, 0), (1, -1)]
        assert normalized[0].letter == "A"

    def test_view_coordinates_round_trip(self):
        """to_view_coordinates undoes normalize_selection."""
        cells = [Cell(x=-3, y=4)]
        assert to_view_coordinates(normalize_selection(cells, (4, 4)), (4, 4)) == cells

    def test_zero_offset_is_identity(self):
        """Without an offset the coordinates are unchanged."""
        assert normalize_selection([(2, 3)]) == [Cell(x=2, y=3)]

    def test_three_adjacent_edges(self):
        """A cell with path on exactly three sides."""
        path = {(0, 1), (1, 0), (2, 1)}
        assert has_three_adjacent_edges(1, 1, path) is True
        assert has_three_adjacent_edges(1, 1, path | {(1, 2)}) is False
        assert has_three_adjacent_edges(1, 1, {(0, 1)}) is False

    def test_congestion(self):
        """A cell between two path cells on opposite sides is congested."""
        assert is_cell_congested(1, 0, {(0, 0), (2, 0)}) is True
        assert is_cell_congested(0, 1, {(0, 0), (0, 2)}) is True
        assert is_cell_congested(1, 1, {(0, 1), (1, 0)}) is False
