"""
Base player interface: anything that produces direction inputs.
"""

from typing import Callable, Optional

from domain.constants import RUNNING
from domain.game_state import GameState


class Player:
    """
    Base class/interface for automated input sources.

    Each player looks at a snapshot and proposes a direction for its own
    snake. Proposals go through the same InputQueue as keyboard input.
    """

    def __init__(self, role: str):
        self.role = role

    def get_move(self, game_state: GameState) -> Optional[str]:
        """
        Return a direction given the current game state.

        Args:
            game_state: Current snapshot of the match

        Returns:
            One of: "UP", "DOWN", "LEFT", "RIGHT", or None to keep going
        """
        raise NotImplementedError


def drive(controller, player: Player) -> Callable[[], None]:
    """
    Feed ``player``'s moves into ``controller`` once per tick.

    Returns:
        A function that detaches the player again
    """
    last_tick = {"value": -1}

    def on_state(state: GameState) -> None:
        if state.phase != RUNNING or state.tick == last_tick["value"]:
            return
        last_tick["value"] = state.tick
        move = player.get_move(state)
        if move is not None:
            controller.enqueue_direction(move)

    return controller.on_state_change(on_state)
