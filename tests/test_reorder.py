"""Tests for list-move helpers."""

import itertools

import pytest

from vidfeed.navigation.reorder import move_item, translate_index


class TestMoveItem:
    def test_forward(self):
        assert move_item(["a", "b", "c", "d"], 0, 2) == ["b", "c", "a", "d"]

    def test_backward(self):
        assert move_item(["a", "b", "c", "d"], 3, 1) == ["a", "d", "b", "c"]

    def test_returns_copy(self):
        items = [1, 2, 3]
        move_item(items, 0, 2)
        assert items == [1, 2, 3]

    @pytest.mark.parametrize("old,new", [(-1, 0), (0, 3), (3, 0)])
    def test_out_of_range(self, old, new):
        with pytest.raises(IndexError):
            move_item([1, 2, 3], old, new)


class TestTranslateIndex:
    def test_active_item_moved(self):
        assert translate_index(1, 1, 3) == 3

    def test_examples(self):
        # [A,B,C,D] active B; move A to 2 -> [B,C,A,D]
        assert translate_index(1, 0, 2) == 0
        # move D to 0 -> [D,A,B,C]
        assert translate_index(1, 3, 0) == 2
        # unaffected
        assert translate_index(0, 2, 3) == 0

    def test_matches_move_item_for_every_move(self):
        items = list("abcde")
        for active, old, new in itertools.product(range(5), repeat=3):
            moved = move_item(items, old, new)
            assert moved[translate_index(active, old, new)] == items[active]
