"""
Random player implementation - picks random safe moves.
"""

import random
from typing import List, Optional

from domain.constants import VALID_MOVES, opponent_of
from domain.game_state import GameState
from domain.geometry import advance, is_reversal, is_wall_collision
from .base import Player


class RandomPlayer(Player):
    """
    A random AI that picks a direction that avoids walls, both snakes and
    reversing into itself.

    Args:
        role: 'host' or 'guest'
        rng: random source, pass a seeded one for reproducible games
        turn_chance: probability of considering a turn when going straight is safe
        wrap_walls: the board wraps around, so edges are not deadly
    """

    def __init__(
        self,
        role: str,
        rng: Optional[random.Random] = None,
        turn_chance: float = 0.2,
        wrap_walls: bool = False,
    ):
        super().__init__(role)
        self.rng = rng or random.Random()
        self.turn_chance = turn_chance
        self.wrap_walls = wrap_walls

    def safe_moves(self, game_state: GameState) -> List[str]:
        me = game_state.slot(self.role)
        opponent = game_state.slot(opponent_of(self.role))
        blocked = set(me.body[:-1]) | set(opponent.body)
        grid = game_state.grid_size if self.wrap_walls else None

        valid_moves: List[str] = []
        for move in sorted(VALID_MOVES):
            if is_reversal(move, me.direction):
                continue
            new_head = advance(me.head, move, grid)
            if grid is None and is_wall_collision(new_head, game_state.grid_size):
                continue
            if new_head in blocked:
                continue
            valid_moves.append(move)
        return valid_moves

    def get_move(self, game_state: GameState) -> Optional[str]:
        me = game_state.slot(self.role)
        valid_moves = self.safe_moves(game_state)

        # If no valid moves, keep going (we'll die anyway)
        if not valid_moves:
            return None

        if me.direction in valid_moves and self.rng.random() >= self.turn_chance:
            return None

        return self.rng.choice(valid_moves)
