"""
Tests for services.realtime_channel.SupabaseRealtimeChannel with a mocked
async Supabase client.
"""

import asyncio
import os
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.realtime_channel import SupabaseRealtimeChannel
from sync.channel import CHANNEL_ERROR, SUBSCRIBED

TOPIC = "game:ABC123"


def make_client(status=SUBSCRIBED):
    """Client whose realtime channel reports ``status`` as soon as it is joined."""
    realtime = MagicMock()

    async def subscribe(callback):
        callback(status, None)
        return realtime

    realtime.subscribe = subscribe
    realtime.send_broadcast = AsyncMock()
    realtime.track = AsyncMock()

    client = MagicMock()
    client.channel.return_value = realtime
    client.remove_channel = AsyncMock()
    return client, realtime


class TestConnect:
    """Joining a realtime channel."""

    def test_connect_waits_for_subscribed(self):
        client, realtime = make_client()
        channel = SupabaseRealtimeChannel(client)
        statuses = []
        channel.on_status(lambda topic, status: statuses.append((topic, status)))

        asyncio.run(channel.connect(TOPIC))

        assert channel.is_connected(TOPIC)
        assert statuses == [(TOPIC, SUBSCRIBED)]
        client.channel.assert_called_once_with(TOPIC)

    def test_failed_join_raises_connection_error(self):
        client, realtime = make_client(status=CHANNEL_ERROR)
        channel = SupabaseRealtimeChannel(client)

        with pytest.raises(ConnectionError):
            asyncio.run(channel.connect(TOPIC))
        assert not channel.is_connected(TOPIC)


class TestBroadcast:
    """Handlers and fire-and-forget sends."""

    def test_handler_receives_unwrapped_payload(self):
        client, realtime = make_client()
        channel = SupabaseRealtimeChannel(client)
        received = []

        channel.subscribe(TOPIC, "direction-change", received.append)
        event_name, callback = realtime.on_broadcast.call_args[0]
        callback({"type": "broadcast", "event": "direction-change", "payload": {"playerId": "p2", "direction": "UP"}})
        callback({"playerId": "p2", "direction": "DOWN"})

        assert event_name == "direction-change"
        assert received == [
            {"playerId": "p2", "direction": "UP"},
            {"playerId": "p2", "direction": "DOWN"},
        ]

    def test_publish_sends_and_close_leaves_channel(self):
        client, realtime = make_client()
        channel = SupabaseRealtimeChannel(client)

        async def run():
            await channel.connect(TOPIC)
            channel.publish(TOPIC, "food-placed", {"playerId": "p1", "coordinate": {"x": 1, "y": 2}})
            await channel.close()

        asyncio.run(run())

        realtime.send_broadcast.assert_awaited_once_with(
            "food-placed", {"playerId": "p1", "coordinate": {"x": 1, "y": 2}}
        )
        client.remove_channel.assert_awaited_once_with(realtime)
        assert not channel.is_connected(TOPIC)

    def test_failed_send_does_not_raise(self):
        client, realtime = make_client()
        realtime.send_broadcast = AsyncMock(side_effect=ConnectionError("socket closed"))
        channel = SupabaseRealtimeChannel(client)

        async def run():
            await channel.connect(TOPIC)
            channel.publish(TOPIC, "game-over", {"playerId": "p1", "winnerId": None, "winnerRole": None})
            await asyncio.sleep(0)
            await channel.close()

        asyncio.run(run())
        realtime.send_broadcast.assert_awaited_once()

    def test_publish_before_subscribe_raises(self):
        channel = SupabaseRealtimeChannel(MagicMock())
        with pytest.raises(RuntimeError):
            channel.publish(TOPIC, "game-over", {})

    def test_unsubscribe_without_loop_is_safe(self):
        client, realtime = make_client()
        channel = SupabaseRealtimeChannel(client)
        channel.subscribe(TOPIC, "game-over", lambda payload: None)

        channel.unsubscribe(TOPIC)
        channel.unsubscribe(TOPIC)

        client.remove_channel.assert_not_called()


class TestPresence:
    """Presence joins and tracking."""

    def test_presence_join_reaches_presence_listeners(self):
        client, realtime = make_client()
        channel = SupabaseRealtimeChannel(client)
        seen = []
        channel.on_presence(lambda topic, state: seen.append((topic, state)))

        channel.subscribe(TOPIC, "game-over", lambda payload: None)
        callback = realtime.on_presence_join.call_args[0][0]
        callback("key", [], [{"playerId": "p2", "role": "guest", "presence_ref": "ref-1"}])

        assert seen == [(TOPIC, {"playerId": "p2", "role": "guest", "presence_ref": "ref-1"})]
        realtime.on_presence_join.assert_called_once()

    def test_track_is_sent_on_the_loop(self):
        client, realtime = make_client()
        channel = SupabaseRealtimeChannel(client)

        async def run():
            await channel.connect(TOPIC)
            channel.track(TOPIC, {"playerId": "p1", "role": "host"})
            await channel.close()

        asyncio.run(run())
        realtime.track.assert_awaited_once_with({"playerId": "p1", "role": "host"})

    def test_track_before_subscribe_raises(self):
        channel = SupabaseRealtimeChannel(MagicMock())
        with pytest.raises(RuntimeError):
            channel.track(TOPIC, {"playerId": "p1"})
