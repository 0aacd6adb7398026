"""
Match state: the mutable state a MatchController owns, and the immutable
GameState snapshots handed to everyone else.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .constants import (
    COUNTDOWN_SECONDS,
    ENDED,
    GRID_SIZE,
    GUEST,
    GUEST_START_DIRECTION,
    HOST,
    HOST_START,
    HOST_START_DIRECTION,
    INITIAL_FOOD,
    ROLES,
    STARTING,
    guest_start,
)
from .snake import Snake

Coordinate = Tuple[int, int]


@dataclass(frozen=True)
class SlotSnapshot:
    """Read-only view of one player slot."""

    player_id: Optional[str]
    role: str
    body: Tuple[Coordinate, ...]
    direction: str
    score: int
    alive: bool = True
    death_reason: Optional[str] = None

    @property
    def head(self) -> Coordinate:
        return self.body[0]

    @property
    def length(self) -> int:
        return len(self.body)


@dataclass(frozen=True)
class GameState:
    """
    A snapshot of the match at a specific point in time.

    Attributes:
        tick: number of completed simulation ticks
        phase: STARTING, RUNNING or ENDED
        host, guest: the two player slots
        food: current food cell
        winner_id: winning player id once ENDED; None for a draw
        winner_role: role of the winner, None for a draw or while running
        countdown: whole seconds left before RUNNING
        grid_size: board dimension
    """

    tick: int
    phase: str
    host: SlotSnapshot
    guest: SlotSnapshot
    food: Coordinate
    winner_id: Optional[str]
    winner_role: Optional[str]
    countdown: int
    grid_size: int

    def slot(self, role: str) -> SlotSnapshot:
        return self.host if role == HOST else self.guest

    @property
    def is_draw(self) -> bool:
        return self.phase == ENDED and self.winner_id is None and self.winner_role is None

    def occupied_cells(self):
        return set(self.host.body) | set(self.guest.body)

    def print_board(self) -> str:
        """
        Returns a string representation of the board with:
        . = empty space
        F = food
        H/G = host/guest head
        h/g = host/guest body
        Row 0 is printed first, matching screen coordinates.
        """
        board = [['.' for _ in range(self.grid_size)] for _ in range(self.grid_size)]

        def place(cell, mark):
            x, y = cell
            if 0 <= x < self.grid_size and 0 <= y < self.grid_size:
                board[y][x] = mark

        place(self.food, 'F')
        for slot, head_mark, body_mark in ((self.host, 'H', 'h'), (self.guest, 'G', 'g')):
            for idx, cell in enumerate(slot.body):
                place(cell, head_mark if idx == 0 else body_mark)

        result = [f"{y:2d} {' '.join(board[y])}" for y in range(self.grid_size)]
        result.append("   " + " ".join(str(i % 10) for i in range(self.grid_size)))
        return "\n".join(result)

    def to_dict(self) -> Dict:
        """JSON-friendly representation, handy for logging and replays."""
        def slot_dict(slot: SlotSnapshot) -> Dict:
            return {
                "player_id": slot.player_id,
                "role": slot.role,
                "body": [list(cell) for cell in slot.body],
                "direction": slot.direction,
                "score": slot.score,
                "alive": slot.alive,
                "death_reason": slot.death_reason,
            }

        return {
            "tick": self.tick,
            "phase": self.phase,
            "host": slot_dict(self.host),
            "guest": slot_dict(self.guest),
            "food": list(self.food),
            "winner_id": self.winner_id,
            "winner_role": self.winner_role,
            "countdown": self.countdown,
            "grid_size": self.grid_size,
        }

    def __repr__(self):
        return (
            f"<GameState tick={self.tick}, phase={self.phase}, food={self.food}, "
            f"scores={{host: {self.host.score}, guest: {self.guest.score}}}, winner={self.winner_id}>"
        )


class PlayerSlot:
    """
    One of the two seats in a match.

    The role is fixed when the slot is created; the player id may be filled
    in later for the opponent once its first message arrives.
    """

    def __init__(self, role: str, snake: Snake, direction: str, player_id: Optional[str] = None):
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role!r}")
        self._role = role
        self.player_id = player_id
        self.snake = snake
        self.direction = direction
        self.score = 0

    @property
    def role(self) -> str:
        return self._role

    def snapshot(self) -> SlotSnapshot:
        return SlotSnapshot(
            player_id=self.player_id,
            role=self._role,
            body=tuple(self.snake.positions),
            direction=self.direction,
            score=self.score,
            alive=self.snake.alive,
            death_reason=self.snake.death_reason,
        )


class MatchState:
    """
    The canonical, mutable state of one match.

    Only the MatchController touches this object. Everyone else gets
    GameState snapshots from ``snapshot()``.
    """

    def __init__(
        self,
        host: PlayerSlot,
        guest: PlayerSlot,
        food: Coordinate = INITIAL_FOOD,
        grid_size: int = GRID_SIZE,
        countdown: int = COUNTDOWN_SECONDS,
    ):
        self.slots: Dict[str, PlayerSlot] = {HOST: host, GUEST: guest}
        self.food = food
        self.grid_size = grid_size
        self.phase = STARTING
        self.tick = 0
        self.countdown = countdown
        self.winner_id: Optional[str] = None
        self.winner_role: Optional[str] = None

    @classmethod
    def initial(
        cls,
        host_id: Optional[str],
        guest_id: Optional[str],
        grid_size: int = GRID_SIZE,
        countdown: int = COUNTDOWN_SECONDS,
        food: Optional[Coordinate] = None,
    ) -> "MatchState":
        """Fixed start: host top-left heading RIGHT, guest bottom-right heading LEFT."""
        host = PlayerSlot(HOST, Snake([HOST_START]), HOST_START_DIRECTION, host_id)
        guest = PlayerSlot(GUEST, Snake([guest_start(grid_size)]), GUEST_START_DIRECTION, guest_id)
        if food is None:
            food = (grid_size // 2, grid_size // 2)
        return cls(host, guest, food=food, grid_size=grid_size, countdown=countdown)

    def slot(self, role: str) -> PlayerSlot:
        return self.slots[role]

    def slot_for_player(self, player_id: str) -> Optional[PlayerSlot]:
        for slot in self.slots.values():
            if slot.player_id == player_id:
                return slot
        return None

    def occupied_cells(self):
        cells = set()
        for slot in self.slots.values():
            cells.update(slot.snake.positions)
        return cells

    def snapshot(self) -> GameState:
        return GameState(
            tick=self.tick,
            phase=self.phase,
            host=self.slots[HOST].snapshot(),
            guest=self.slots[GUEST].snapshot(),
            food=self.food,
            winner_id=self.winner_id,
            winner_role=self.winner_role,
            countdown=self.countdown,
            grid_size=self.grid_size,
        )
