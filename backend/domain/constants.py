"""
Game constants for the two-player duel.
"""

# Movement directions
UP = "UP"
DOWN = "DOWN"
LEFT = "LEFT"
RIGHT = "RIGHT"
VALID_MOVES = {UP, DOWN, LEFT, RIGHT}

# Screen coordinates: (0, 0) is the top-left cell, y grows downwards.
MOVE_OFFSETS = {
    UP: (0, -1),
    DOWN: (0, 1),
    LEFT: (-1, 0),
    RIGHT: (1, 0),
}

OPPOSITES = {
    UP: DOWN,
    DOWN: UP,
    LEFT: RIGHT,
    RIGHT: LEFT,
}

# Player roles
HOST = "host"
GUEST = "guest"
ROLES = (HOST, GUEST)

# Match phases
STARTING = "STARTING"
RUNNING = "RUNNING"
ENDED = "ENDED"

# Death reasons
DEATH_WALL = "wall"
DEATH_SELF = "self"
DEATH_BODY = "body_collision"
DEATH_HEAD = "head_collision"

# Game settings
GRID_SIZE = 20
TICK_INTERVAL = 0.150
COUNTDOWN_SECONDS = 3

HOST_START = (2, 5)
GUEST_START_OFFSET = (3, 6)  # distance from the bottom-right corner
HOST_START_DIRECTION = RIGHT
GUEST_START_DIRECTION = LEFT
INITIAL_FOOD = (10, 10)


def guest_start(grid_size: int = GRID_SIZE):
    """Bottom-right start cell; (17, 14) on the default 20x20 grid."""
    return (grid_size - GUEST_START_OFFSET[0], grid_size - GUEST_START_OFFSET[1])


def opponent_of(role: str) -> str:
    return GUEST if role == HOST else HOST
