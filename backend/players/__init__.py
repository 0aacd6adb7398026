"""
Automated input sources for local and simulated matches.
"""

from .base import Player, drive
from .random_player import RandomPlayer

__all__ = [
    'Player',
    'RandomPlayer',
    'drive',
]
