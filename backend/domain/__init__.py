"""
Domain entities for the duel snake engine.

This module contains the core game entities and rules that are independent
of infrastructure concerns (channels, persistence, timers).
"""

from .constants import (
    UP, DOWN, LEFT, RIGHT, VALID_MOVES, OPPOSITES,
    HOST, GUEST, STARTING, RUNNING, ENDED, GRID_SIZE,
)
from .snake import Snake
from .game_state import GameState, MatchState, PlayerSlot, SlotSnapshot

__all__ = [
    'UP', 'DOWN', 'LEFT', 'RIGHT', 'VALID_MOVES', 'OPPOSITES',
    'HOST', 'GUEST', 'STARTING', 'RUNNING', 'ENDED', 'GRID_SIZE',
    'Snake',
    'GameState',
    'MatchState',
    'PlayerSlot',
    'SlotSnapshot',
]
