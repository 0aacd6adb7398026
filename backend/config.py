"""
Runtime settings for a duel client.

Values come from the environment (optionally a .env file). Everything has a
default matching the reference game: 20x20 grid, 150ms ticks, a 3 second
countdown and solid walls.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from domain.constants import COUNTDOWN_SECONDS, GRID_SIZE, TICK_INTERVAL

MIN_GRID_SIZE = 8

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    """
    Attributes:
        grid_size: board dimension N (cells are 0..N-1 on both axes)
        tick_interval: seconds between simulation ticks
        countdown_seconds: whole seconds spent in STARTING
        wrap_walls: toroidal board instead of deadly walls
        topic_prefix: channel topic is prefix + match code
    """

    grid_size: int = GRID_SIZE
    tick_interval: float = TICK_INTERVAL
    countdown_seconds: int = COUNTDOWN_SECONDS
    wrap_walls: bool = False
    topic_prefix: str = "game:"

    def __post_init__(self):
        if self.grid_size < MIN_GRID_SIZE:
            raise ValueError(f"grid_size must be at least {MIN_GRID_SIZE}, got {self.grid_size}")
        if self.tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {self.tick_interval}")
        if self.countdown_seconds < 0:
            raise ValueError(f"countdown_seconds cannot be negative, got {self.countdown_seconds}")

    def topic_for(self, code: str) -> str:
        return f"{self.topic_prefix}{code}"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables:
        - SNAKE_GRID_SIZE
        - SNAKE_TICK_MS
        - SNAKE_COUNTDOWN_SECONDS
        - SNAKE_WRAP_WALLS
        - SNAKE_TOPIC_PREFIX

        Raises:
            ValueError: If a variable is set to something unparseable
        """
        load_dotenv()

        return cls(
            grid_size=_int_env("SNAKE_GRID_SIZE", GRID_SIZE),
            tick_interval=_int_env("SNAKE_TICK_MS", int(TICK_INTERVAL * 1000)) / 1000.0,
            countdown_seconds=_int_env("SNAKE_COUNTDOWN_SECONDS", COUNTDOWN_SECONDS),
            wrap_walls=_bool_env("SNAKE_WRAP_WALLS", False),
            topic_prefix=os.getenv("SNAKE_TOPIC_PREFIX", "game:"),
        )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")
