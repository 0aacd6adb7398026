"""
Resolution of a single simulation tick.

``resolve_tick`` works on an immutable GameState and returns what should
happen; the MatchController is the one that commits it.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from domain.constants import (
    DEATH_BODY,
    DEATH_HEAD,
    DEATH_SELF,
    DEATH_WALL,
    ROLES,
    opponent_of,
)
from domain.game_state import GameState
from domain.geometry import (
    advance,
    ate_food,
    grow_or_slide,
    is_head_to_head,
    is_opponent_collision,
    is_reversal,
    is_self_collision,
    is_wall_collision,
)

Coordinate = Tuple[int, int]


@dataclass
class TickOutcome:
    """
    Attributes:
        accepted_direction: local direction change applied this tick, if any
        directions: role -> direction the snake moved in
        new_heads: role -> head cell after the move
        death_reason: why the local snake died, None if it survived
        head_to_head: both heads landed on the same cell
        captures: role -> whether that snake ate the food
        new_bodies: role -> body after the move (unchanged bodies on death)
    """

    accepted_direction: Optional[str]
    directions: Dict[str, str]
    new_heads: Dict[str, Coordinate]
    death_reason: Optional[str] = None
    head_to_head: bool = False
    captures: Dict[str, bool] = field(default_factory=dict)
    new_bodies: Dict[str, List[Coordinate]] = field(default_factory=dict)

    @property
    def local_died(self) -> bool:
        return self.death_reason is not None

    @property
    def any_capture(self) -> bool:
        return any(self.captures.values())


def local_death_reason(
    state: GameState,
    local_role: str,
    new_heads: Dict[str, Coordinate],
    wrap_walls: bool = False,
) -> Optional[str]:
    """
    Evaluate the local snake in the fixed order wall, self, opponent body,
    head-to-head. The first hit wins; head-to-head is still reported
    separately by the caller.
    """
    me = state.slot(local_role)
    opponent = state.slot(opponent_of(local_role))
    head = new_heads[local_role]

    if not wrap_walls and is_wall_collision(head, state.grid_size):
        return DEATH_WALL
    if is_self_collision(head, me.body):
        return DEATH_SELF
    if is_opponent_collision(head, opponent.body):
        return DEATH_BODY
    if is_head_to_head(head, new_heads[opponent.role]):
        return DEATH_HEAD
    return None


def resolve_tick(
    state: GameState,
    local_role: str,
    drained: Optional[str] = None,
    wrap_walls: bool = False,
) -> TickOutcome:
    """
    Work out one tick for both snakes.

    Args:
        state: snapshot taken at the start of the tick
        local_role: role of the snake this instance controls
        drained: direction popped from the local InputQueue, if any
        wrap_walls: use the toroidal board

    Only the local snake is judged for death. The opponent's snake moves in
    whatever direction was last received for it.
    """
    directions = {role: state.slot(role).direction for role in ROLES}

    accepted = None
    if drained is not None and not is_reversal(drained, directions[local_role]):
        accepted = drained
        directions[local_role] = drained

    grid = state.grid_size if wrap_walls else None
    new_heads = {
        role: advance(state.slot(role).head, directions[role], grid)
        for role in ROLES
    }

    outcome = TickOutcome(
        accepted_direction=accepted,
        directions=directions,
        new_heads=new_heads,
    )

    outcome.head_to_head = is_head_to_head(new_heads[ROLES[0]], new_heads[ROLES[1]])
    outcome.death_reason = local_death_reason(state, local_role, new_heads, wrap_walls)

    if outcome.local_died:
        outcome.captures = {role: False for role in ROLES}
        outcome.new_bodies = {role: list(state.slot(role).body) for role in ROLES}
        return outcome

    for role in ROLES:
        grew = ate_food(new_heads[role], state.food)
        outcome.captures[role] = grew
        outcome.new_bodies[role] = grow_or_slide(state.slot(role).body, new_heads[role], grew)

    return outcome
