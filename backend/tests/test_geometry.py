"""
Tests for domain.geometry - movement and collision rules.
"""

import os
import random
import sys

import pytest

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from domain.constants import UP, DOWN, LEFT, RIGHT, VALID_MOVES, OPPOSITES
from domain.geometry import (
    advance,
    ate_food,
    grow_or_slide,
    is_head_to_head,
    is_opponent_collision,
    is_reversal,
    is_self_collision,
    is_wall_collision,
    random_free_cell,
)


class TestAdvance:
    """Tests for advance()."""

    @pytest.mark.parametrize("direction,expected", [
        (UP, (5, 4)),
        (DOWN, (5, 6)),
        (LEFT, (4, 5)),
        (RIGHT, (6, 5)),
    ])
    def test_unit_offsets_use_screen_coordinates(self, direction, expected):
        """UP decreases y, DOWN increases y."""
        assert advance((5, 5), direction) == expected

    def test_no_implicit_wrapping(self):
        """Leaving the board produces an out-of-bounds cell, not a teleport."""
        assert advance((19, 5), RIGHT) == (20, 5)
        assert advance((0, 0), UP) == (0, -1)

    def test_wraparound_variant(self):
        """With a grid size the head re-enters on the opposite edge."""
        assert advance((19, 5), RIGHT, 20) == (0, 5)
        assert advance((0, 0), UP, 20) == (0, 19)


class TestCollisions:
    """Tests for the collision predicates."""

    @pytest.mark.parametrize("head,hit", [
        ((0, 0), False),
        ((19, 19), False),
        ((-1, 3), True),
        ((3, -1), True),
        ((20, 3), True),
        ((3, 20), True),
    ])
    def test_wall_collision(self, head, hit):
        assert is_wall_collision(head, 20) is hit

    def test_self_collision_ignores_current_head(self):
        """A length-1 snake can never hit itself."""
        assert is_self_collision((5, 5), [(5, 5)]) is False

    def test_self_collision_against_trailing_segments(self):
        body = [(5, 5), (5, 6), (6, 6), (6, 5)]
        assert is_self_collision((6, 5), body) is True
        assert is_self_collision((4, 5), body) is False

    def test_opponent_collision_includes_opponent_head(self):
        opponent = [(8, 8), (8, 9)]
        assert is_opponent_collision((8, 8), opponent) is True
        assert is_opponent_collision((8, 9), opponent) is True
        assert is_opponent_collision((7, 8), opponent) is False

    def test_head_to_head(self):
        assert is_head_to_head((3, 3), (3, 3)) is True
        assert is_head_to_head((3, 3), (3, 4)) is False

    def test_ate_food_is_exact_equality(self):
        assert ate_food((10, 10), (10, 10)) is True
        assert ate_food((10, 11), (10, 10)) is False


class TestReversal:
    """Reversal is exactly the opposite direction."""

    @pytest.mark.parametrize("current", sorted(VALID_MOVES))
    @pytest.mark.parametrize("proposed", sorted(VALID_MOVES))
    def test_reversal_iff_opposite(self, current, proposed):
        assert is_reversal(proposed, current) is (OPPOSITES[current] == proposed)


class TestGrowOrSlide:
    """Tests for grow_or_slide()."""

    def test_slide_keeps_length(self):
        body = [(5, 5), (4, 5), (3, 5)]
        new_body = grow_or_slide(body, (6, 5), grew=False)
        assert new_body == [(6, 5), (5, 5), (4, 5)]
        assert len(new_body) == len(body)

    def test_grow_adds_one_segment(self):
        body = [(5, 5), (4, 5)]
        new_body = grow_or_slide(body, (6, 5), grew=True)
        assert new_body == [(6, 5), (5, 5), (4, 5)]

    def test_input_body_is_not_mutated(self):
        body = [(5, 5)]
        grow_or_slide(body, (5, 4), grew=False)
        assert body == [(5, 5)]


class TestRandomFreeCell:
    """Tests for random_free_cell()."""

    def test_never_returns_an_occupied_cell(self):
        rng = random.Random(7)
        occupied = {(x, y) for x in range(8) for y in range(8) if (x + y) % 3}
        for _ in range(50):
            cell = random_free_cell(occupied, 8, rng)
            assert cell not in occupied
            assert 0 <= cell[0] < 8 and 0 <= cell[1] < 8

    def test_finds_the_last_free_cell(self):
        occupied = {(x, y) for x in range(8) for y in range(8)} - {(3, 4)}
        assert random_free_cell(occupied, 8, random.Random(1)) == (3, 4)

    def test_full_board_returns_none(self):
        occupied = {(x, y) for x in range(8) for y in range(8)}
        assert random_free_cell(occupied, 8, random.Random(1)) is None
