"""Test pair-biased selection of cells to erode."""

import random

import pytest

from isle_erosion.erosion import Cell, find_pairs, select_cells_to_erode, shuffle_items


def line(length: int, y: int = 0):
    return [Cell(x=x, y=y) for x in range(length)]


def ring_cells():
    """The eight cells around the origin."""
    return [
        Cell(x=x, y=y)
        for y in range(-1, 2) for x in range(-1, 2)
        if (x, y) != (0, 0)
    ]


def adjacent(a: Cell, b: Cell) -> bool:
    return abs(a.x - b.x) + abs(a.y - b.y) == 1


class TestFindPairs:
    """Test adjacent pair detection."""

    def test_square_has_four_pairs(self):
        """A 2x2 block has two horizontal and two vertical pairs."""
        square = [Cell(x=0, y=0), Cell(x=1, y=0), Cell(x=0, y=1), Cell(x=1, y=1)]
        pairs = find_pairs(square)

        assert len(pairs) == 4
        assert sorted(p.orientation for p in pairs) == ['H', 'H', 'V', 'V']

    def test_pairs_are_unique_and_canonical(self):
        """Each pair appears once with its lower coordinate first."""
        pairs = find_pairs(line(5))

        assert len(pairs) == 4
        assert len({p.id for p in pairs}) == 4
        for pair in pairs:
            assert pair.first.key < pair.second.key

    def test_isolated_cells_have_no_pairs(self):
        """Diagonal neighbors do not pair."""
        assert find_pairs([Cell(x=0, y=0), Cell(x=1, y=1)]) == []


class TestSelectCellsToErode:
    """Test the selection contract."""

    def test_returns_all_when_count_covers_candidates(self):
        """Asking for at least as many cells as exist returns a copy of all."""
        candidates = line(3)
        selected = select_cells_to_erode(candidates, 5)

        assert selected == candidates
        selected.pop()
        assert len(candidates) == 3

    def test_count_must_be_positive(self):
        """A count below 1 is a caller error."""
        with pytest.raises(ValueError):
            select_cells_to_erode(line(3), 0)

    def test_exact_size_members_and_unique(self):
        """Always min(count, len) distinct members of the candidates."""
        rng = random.Random(5)
        for trial in range(200):
            width = rng.randint(1, 6)
            height = rng.randint(1, 6)
            candidates = [
                Cell(x=x, y=y) for y in range(height) for x in range(width)
                if rng.random() < 0.8
            ]
            if not candidates:
                continue
            count = rng.randint(1, 12)

            selected = select_cells_to_erode(candidates, count, rng=rng)

            assert len(selected) == min(count, len(candidates))
            assert len({c.key for c in selected}) == len(selected)
            assert {c.key for c in selected} <= {c.key for c in candidates}

    def test_duplicate_candidates_counted_once(self):
        """Repeated coordinates never produce duplicate selections."""
        candidates = line(4) + line(4)
        selected = select_cells_to_erode(candidates, 6, rng=random.Random(1))

        assert len(selected) == 4
        assert len({c.key for c in selected}) == 4

    def test_forced_pairs_select_adjacent_cells(self):
        """With pairs prioritized, every selected cell has a selected neighbor."""
        for seed in range(20):
            selected = select_cells_to_erode(line(10), 4, prioritize_pairs=True, rng=random.Random(seed))

            assert len(selected) == 4
            for cell in selected:
                assert any(adjacent(cell, other) for other in selected)

    def test_outer_layer_pairs_go_first(self):
        """Pairs in the outermost ring are taken before inner ones."""
        candidates = [
            Cell(x=0, y=0, layer=1), Cell(x=1, y=0, layer=1),
            Cell(x=5, y=5, layer=3), Cell(x=6, y=5, layer=3),
            Cell(x=9, y=0, layer=2), Cell(x=9, y=1, layer=2),
        ]
        for seed in range(10):
            selected = select_cells_to_erode(candidates, 2, prioritize_pairs=True, rng=random.Random(seed))
            assert {c.key for c in selected} == {(5, 5), (6, 5)}

    def test_odd_count_fills_with_single(self):
        """An odd quota takes pairs first and one single."""
        selected = select_cells_to_erode(line(10), 5, prioritize_pairs=True, rng=random.Random(2))

        assert len(selected) == 5
        assert len({c.key for c in selected}) == 5

    def test_skipping_pairs_still_fills_quota(self):
        """Without the pair pass, singles fill the whole quota."""
        selected = select_cells_to_erode(line(10), 3, prioritize_pairs=False, rng=random.Random(4))

        assert len(selected) == 3

    def test_no_pairs_available(self):
        """Scattered candidates fall back to singles."""
        scattered = [Cell(x=2 * i, y=0) for i in range(6)]
        selected = select_cells_to_erode(scattered, 4, prioritize_pairs=True, rng=random.Random(0))

        assert len(selected) == 4

    def test_pairs_appear_in_some_trials(self):
        """With disjoint adjacent pairs available, some selections contain a complete pair."""
        candidates = [
            Cell(x=0, y=0), Cell(x=1, y=0),
            Cell(x=5, y=5), Cell(x=5, y=6),
            Cell(x=10, y=0), Cell(x=20, y=0), Cell(x=30, y=0),
        ]
        rng = random.Random(9)
        found_pair = False
        for _ in range(100):
            selected = select_cells_to_erode(candidates, 4, rng=rng)
            if any(adjacent(a, b) for a in selected for b in selected):
                found_pair = True
                break

        assert found_pair

    def test_ring_pair_rate(self):
        """Selecting 2 of the 8 ring cells picks an adjacent pair well over chance."""
        rng = random.Random(1234)
        trials = 1000
        adjacent_hits = 0
        for _ in range(trials):
            first, second = select_cells_to_erode(ring_cells(), 2, rng=rng)
            if adjacent(first, second):
                adjacent_hits += 1

        # Expected 0.5 + 0.5 * 8/28 ~ 0.64; uniform singles alone give ~0.29
        rate = adjacent_hits / trials
        assert 0.5 < rate < 0.8


class TestShuffleItems:
    """Test the shuffle helper."""

    def test_returns_permutation_copy(self):
        """The input is untouched and the output is a permutation."""
        items = list(range(10))
        shuffled = shuffle_items(items, random.Random(3))

        assert items == list(range(10))
        assert sorted(shuffled) == items
