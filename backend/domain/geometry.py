"""
Pure movement and collision rules.

Coordinates are ``(x, y)`` tuples. Nothing in here keeps state; the tick
resolver and the players call these helpers against snapshots.
"""

import random
from typing import Iterable, List, Optional, Sequence, Tuple

from .constants import MOVE_OFFSETS, OPPOSITES, VALID_MOVES

Coordinate = Tuple[int, int]


def advance(position: Coordinate, direction: str, grid_size: Optional[int] = None) -> Coordinate:
    """
    Return the cell one step from ``position`` in ``direction``.

    Without ``grid_size`` there is no wrapping: leaving the board is a wall
    collision, not a teleport. Passing ``grid_size`` selects the toroidal
    variant where the head re-enters on the opposite edge.
    """
    dx, dy = MOVE_OFFSETS[direction]
    x, y = position[0] + dx, position[1] + dy
    if grid_size is not None:
        x %= grid_size
        y %= grid_size
    return (x, y)


def is_reversal(proposed: str, current: str) -> bool:
    """True if ``proposed`` is the exact opposite of ``current``."""
    return OPPOSITES.get(current) == proposed


def is_valid_direction(direction) -> bool:
    return isinstance(direction, str) and direction in VALID_MOVES


def is_in_bounds(position: Coordinate, grid_size: int) -> bool:
    x, y = position
    return 0 <= x < grid_size and 0 <= y < grid_size


def is_wall_collision(head: Coordinate, grid_size: int) -> bool:
    return not is_in_bounds(head, grid_size)


def is_self_collision(head: Coordinate, snake_body: Sequence[Coordinate]) -> bool:
    """
    Check ``head`` against the pre-move body, skipping the current head.

    The tail segment is still included even though it slides away this tick.
    """
    return any(head == segment for segment in list(snake_body)[1:])


def is_opponent_collision(head: Coordinate, opponent_body: Iterable[Coordinate]) -> bool:
    """Check ``head`` against every opponent segment, its head included."""
    return any(head == segment for segment in opponent_body)


def is_head_to_head(head_a: Coordinate, head_b: Coordinate) -> bool:
    return head_a == head_b


def ate_food(head: Coordinate, food: Coordinate) -> bool:
    return head == food


def grow_or_slide(body: Sequence[Coordinate], new_head: Coordinate, grew: bool) -> List[Coordinate]:
    """Prepend ``new_head``; drop the tail unless the snake grew this tick."""
    new_body = [new_head] + list(body)
    if not grew:
        new_body.pop()
    return new_body


def random_free_cell(
    occupied: Iterable[Coordinate],
    grid_size: int,
    rng: Optional[random.Random] = None,
    max_attempts: int = 100,
) -> Optional[Coordinate]:
    """
    Return a random cell not in ``occupied``, or None if the board is full.

    Tries random picks first and falls back to scanning the free cells so a
    crowded board still terminates.
    """
    rng = rng or random
    taken = set(occupied)

    for _ in range(max_attempts):
        cell = (rng.randint(0, grid_size - 1), rng.randint(0, grid_size - 1))
        if cell not in taken:
            return cell

    free = [
        (x, y)
        for y in range(grid_size)
        for x in range(grid_size)
        if (x, y) not in taken
    ]
    if not free:
        return None
    return rng.choice(free)
