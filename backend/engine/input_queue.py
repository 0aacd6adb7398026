"""
Per-player buffer of pending direction changes.

Key presses arrive whenever the user hits them; the simulation only applies
one change per tick. The queue sits in between.
"""

from collections import deque
from typing import Optional

from domain.geometry import is_reversal, is_valid_direction


class InputQueue:
    """
    FIFO of validated directions for the local player.

    ``enqueue`` does the soft check against the last accepted direction.
    The tick re-checks against the snake's actual direction when it drains.
    """

    def __init__(self, initial_direction: str):
        self._pending = deque()
        self._last_accepted = initial_direction

    @property
    def last_accepted(self) -> str:
        return self._last_accepted

    def enqueue(self, direction: str) -> bool:
        """Queue ``direction``; returns False if it was filtered out."""
        if not is_valid_direction(direction):
            return False
        if is_reversal(direction, self._last_accepted):
            return False
        self._pending.append(direction)
        self._last_accepted = direction
        return True

    def drain(self) -> Optional[str]:
        """Pop the oldest pending direction, or None when empty."""
        if not self._pending:
            return None
        return self._pending.popleft()

    def rebase(self, direction: str) -> None:
        """
        Re-anchor the soft check on ``direction`` once nothing is pending.

        Called after the tick rejects a drained entry, so the next key press
        is judged against where the snake is really heading.
        """
        if not self._pending:
            self._last_accepted = direction

    def clear(self) -> None:
        self._pending.clear()

    def __len__(self) -> int:
        return len(self._pending)

    def __repr__(self):
        return f"<InputQueue pending={list(self._pending)} last={self._last_accepted}>"
