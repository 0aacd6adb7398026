"""
Tests for domain.game_state.
"""

import os
import sys

import pytest

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from domain.constants import ENDED, GUEST, HOST, STARTING
from domain.game_state import MatchState, PlayerSlot
from domain.snake import Snake


class TestMatchState:
    """Initial layout and snapshots."""

    def test_initial_layout(self):
        snapshot = MatchState.initial("host-1", "guest-1").snapshot()

        assert snapshot.phase == STARTING
        assert snapshot.host.body == ((2, 5),)
        assert snapshot.host.direction == "RIGHT"
        assert snapshot.guest.body == ((17, 14),)
        assert snapshot.guest.direction == "LEFT"
        assert snapshot.food == (10, 10)
        assert snapshot.countdown == 3

    def test_initial_layout_scales_with_grid(self):
        snapshot = MatchState.initial("host-1", "guest-1", grid_size=30).snapshot()
        assert snapshot.guest.head == (27, 24)
        assert snapshot.food == (15, 15)

    def test_slot_for_player(self):
        state = MatchState.initial("host-1", None)
        assert state.slot_for_player("host-1").role == HOST
        assert state.slot_for_player("guest-1") is None

    def test_draw_detection(self):
        state = MatchState.initial("host-1", "guest-1")
        assert not state.snapshot().is_draw
        state.phase = ENDED
        assert state.snapshot().is_draw
        state.winner_role = GUEST
        assert not state.snapshot().is_draw


class TestPlayerSlot:
    """Role is fixed for the life of the slot."""

    def test_role_is_read_only(self):
        slot = PlayerSlot(HOST, Snake([(0, 0)]), "RIGHT", "host-1")
        with pytest.raises(AttributeError):
            slot.role = GUEST

    def test_unknown_role(self):
        with pytest.raises(ValueError):
            PlayerSlot("spectator", Snake([(0, 0)]), "RIGHT")

    def test_empty_snake_rejected(self):
        with pytest.raises(ValueError):
            Snake([])


class TestBoardRendering:
    """Text rendering used by the CLI and in logs."""

    def test_print_board_marks(self):
        state = MatchState.initial("host-1", "guest-1", grid_size=8, food=(0, 0))
        state.slot(HOST).snake.replace_body([(2, 5), (1, 5)])
        rows = state.snapshot().print_board().split("\n")

        assert len(rows) == 9
        assert rows[0].split()[1:] == ["F", ".", ".", ".", ".", ".", ".", "."]
        assert rows[5].split()[1:4] == [".", "h", "H"]
        assert rows[2].split()[6] == "G"
        assert rows[-1].split() == [str(i) for i in range(8)]

    def test_to_dict(self):
        data = MatchState.initial("host-1", "guest-1").snapshot().to_dict()
        assert data["host"]["body"] == [[2, 5]]
        assert data["food"] == [10, 10]
        assert data["winner_id"] is None
