"""
Tests for sync.messages - payload validation.
"""

import json
import os
import sys

import pytest

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sync.messages import (
    DIRECTION_CHANGE,
    FOOD_PLACED,
    GAME_OVER,
    DirectionChange,
    FoodPlaced,
    GameOver,
    MalformedMessage,
    PresenceJoined,
    decode,
    decode_presence,
    encode_direction_change,
    encode_food_placed,
    encode_game_over,
    encode_presence,
)


class TestEncode:
    """Outbound payloads carry the sender and absolute values only."""

    def test_direction_change_payload(self):
        assert encode_direction_change("p1", "UP") == {"playerId": "p1", "direction": "UP"}

    def test_food_payload(self):
        assert encode_food_placed("p1", (3, 4)) == {"playerId": "p1", "coordinate": {"x": 3, "y": 4}}

    def test_game_over_payload_allows_draw(self):
        assert encode_game_over("p1", None, None) == {"playerId": "p1", "winnerId": None, "winnerRole": None}


class TestDecode:
    """Inbound validation."""

    def test_direction_change(self):
        event = decode(DIRECTION_CHANGE, {"playerId": "p2", "direction": "LEFT"}, 20)
        assert event == DirectionChange(player_id="p2", direction="LEFT")

    def test_food_placed_accepts_list_coordinates(self):
        event = decode(FOOD_PLACED, {"playerId": "p1", "coordinate": [4, 7]}, 20)
        assert event == FoodPlaced(player_id="p1", coordinate=(4, 7))

    def test_game_over(self):
        event = decode(GAME_OVER, {"playerId": "p1", "winnerId": "p2", "winnerRole": "guest"}, 20)
        assert event == GameOver(player_id="p1", winner_id="p2", winner_role="guest")

    def test_json_string_payload(self):
        raw = json.dumps({"playerId": "p2", "direction": "UP"})
        assert decode(DIRECTION_CHANGE, raw, 20).direction == "UP"

    @pytest.mark.parametrize("event_name,payload", [
        (DIRECTION_CHANGE, {"direction": "UP"}),
        (DIRECTION_CHANGE, {"playerId": "p2"}),
        (DIRECTION_CHANGE, {"playerId": "p2", "direction": "SIDEWAYS"}),
        (FOOD_PLACED, {"playerId": "p1"}),
        (FOOD_PLACED, {"playerId": "p1", "coordinate": {"x": 3}}),
        (FOOD_PLACED, {"playerId": "p1", "coordinate": {"x": "3", "y": 4}}),
        (FOOD_PLACED, {"playerId": "p1", "coordinate": {"x": True, "y": 4}}),
        (FOOD_PLACED, {"playerId": "p1", "coordinate": {"x": 20, "y": 4}}),
        (GAME_OVER, {"playerId": "p1"}),
        (GAME_OVER, {"playerId": "p1", "winnerId": 7}),
        (GAME_OVER, {"playerId": "p1", "winnerId": "p2", "winnerRole": "referee"}),
        ("chat", {"playerId": "p1"}),
        (DIRECTION_CHANGE, ["UP"]),
        (DIRECTION_CHANGE, "not json"),
    ])
    def test_malformed_payloads_raise(self, event_name, payload):
        with pytest.raises(MalformedMessage):
            decode(event_name, payload, 20)


class TestPresence:
    """Presence entries announce a player's id and role."""

    def test_round_trip_ignores_transport_keys(self):
        state = dict(encode_presence("p1", "host"), presence_ref="ref-1")
        assert decode_presence(state) == PresenceJoined(player_id="p1", role="host")

    def test_role_is_optional(self):
        assert decode_presence({"playerId": "p1"}).role is None

    @pytest.mark.parametrize("state", [
        {"role": "host"},
        {"playerId": "p1", "role": "referee"},
        "[]",
    ])
    def test_malformed_presence_raises(self, state):
        with pytest.raises(MalformedMessage):
            decode_presence(state)
