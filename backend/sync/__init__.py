"""
Peer synchronisation: wire messages, channels and the sync protocol.
"""

from .channel import Channel, InMemoryBroker, InMemoryChannel
from .messages import (
    DIRECTION_CHANGE,
    FOOD_PLACED,
    GAME_OVER,
    DirectionChange,
    FoodPlaced,
    GameOver,
    MalformedMessage,
)
from .protocol import SyncProtocol

__all__ = [
    'Channel',
    'InMemoryBroker',
    'InMemoryChannel',
    'DIRECTION_CHANGE',
    'FOOD_PLACED',
    'GAME_OVER',
    'DirectionChange',
    'FoodPlaced',
    'GameOver',
    'MalformedMessage',
    'SyncProtocol',
]
