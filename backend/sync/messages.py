"""
Wire format for the three broadcast events.

All payloads are flat JSON objects and always carry ``playerId`` (the
sender). Messages only ever set absolute state, so duplicates and
reordering are harmless:

- direction-change: { playerId: str, direction: 'UP'|'DOWN'|'LEFT'|'RIGHT' }
- food-placed:      { playerId: str, coordinate: { x: int, y: int } }     (host only)
- game-over:        { playerId: str, winnerId: str|null, winnerRole: 'host'|'guest'|null }

Presence is tracked separately from broadcasts, once per connection:

- presence:         { playerId: str, role: 'host'|'guest'|null }
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from domain.constants import ROLES
from domain.geometry import is_in_bounds, is_valid_direction

DIRECTION_CHANGE = "direction-change"
FOOD_PLACED = "food-placed"
GAME_OVER = "game-over"
EVENT_NAMES = (DIRECTION_CHANGE, FOOD_PLACED, GAME_OVER)

Coordinate = Tuple[int, int]


class MalformedMessage(ValueError):
    """A remote payload is missing fields or carries bad values."""


@dataclass(frozen=True)
class DirectionChange:
    player_id: str
    direction: str


@dataclass(frozen=True)
class FoodPlaced:
    player_id: str
    coordinate: Coordinate


@dataclass(frozen=True)
class GameOver:
    player_id: str
    winner_id: Optional[str]
    winner_role: Optional[str]


@dataclass(frozen=True)
class PresenceJoined:
    player_id: str
    role: Optional[str]


RemoteEvent = Union[DirectionChange, FoodPlaced, GameOver, PresenceJoined]


def encode_direction_change(player_id: str, direction: str) -> Dict[str, Any]:
    return {"playerId": player_id, "direction": direction}


def encode_food_placed(player_id: str, coordinate: Coordinate) -> Dict[str, Any]:
    x, y = coordinate
    return {"playerId": player_id, "coordinate": {"x": x, "y": y}}


def encode_game_over(player_id: str, winner_id: Optional[str], winner_role: Optional[str]) -> Dict[str, Any]:
    return {"playerId": player_id, "winnerId": winner_id, "winnerRole": winner_role}


def encode_presence(player_id: str, role: Optional[str]) -> Dict[str, Any]:
    return {"playerId": player_id, "role": role}


def _as_dict(payload) -> Dict[str, Any]:
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise MalformedMessage("Payload is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise MalformedMessage("Payload must be a JSON object")
    return payload


def _require_str(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedMessage(f"Missing or invalid '{key}'")
    return value


def _optional_str(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        raise MalformedMessage(f"'{key}' must be a string or null")
    return value


def _coordinate(raw, grid_size: int) -> Coordinate:
    if isinstance(raw, dict):
        x, y = raw.get("x"), raw.get("y")
    elif isinstance(raw, (list, tuple)) and len(raw) == 2:
        x, y = raw
    else:
        raise MalformedMessage("Missing or invalid 'coordinate'")
    # bool is an int subclass; reject it explicitly
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in (x, y)):
        raise MalformedMessage("Coordinate values must be integers")
    if not is_in_bounds((x, y), grid_size):
        raise MalformedMessage(f"Coordinate {(x, y)} is off the board")
    return (x, y)


def decode(event_name: str, payload, grid_size: int) -> RemoteEvent:
    """
    Validate a raw payload and turn it into a typed event.

    Raises:
        MalformedMessage: unknown event or bad payload
    """
    data = _as_dict(payload)
    sender = _require_str(data, "playerId")

    if event_name == DIRECTION_CHANGE:
        direction = data.get("direction")
        if not is_valid_direction(direction):
            raise MalformedMessage(f"Invalid direction: {direction!r}")
        return DirectionChange(player_id=sender, direction=direction)

    if event_name == FOOD_PLACED:
        return FoodPlaced(player_id=sender, coordinate=_coordinate(data.get("coordinate"), grid_size))

    if event_name == GAME_OVER:
        if "winnerId" not in data:
            raise MalformedMessage("Missing 'winnerId'")
        winner_role = _optional_str(data, "winnerRole")
        if winner_role is not None and winner_role not in ROLES:
            raise MalformedMessage(f"Unknown winnerRole: {winner_role!r}")
        return GameOver(
            player_id=sender,
            winner_id=_optional_str(data, "winnerId"),
            winner_role=winner_role,
        )

    raise MalformedMessage(f"Unknown event: {event_name!r}")


def decode_presence(payload) -> PresenceJoined:
    """
    Validate a presence entry. Transports may add their own keys
    (``presence_ref`` and the like); those are ignored.

    Raises:
        MalformedMessage: missing player id or unknown role
    """
    data = _as_dict(payload)
    role = _optional_str(data, "role")
    if role is not None and role not in ROLES:
        raise MalformedMessage(f"Unknown role: {role!r}")
    return PresenceJoined(player_id=_require_str(data, "playerId"), role=role)
