"""
Channel implementation over Supabase Realtime broadcast.

Topics map one-to-one onto realtime channels (``game:<CODE>``). Publishing
is fire-and-forget: the send is scheduled on the running loop and any
failure is logged, never raised into the tick.
"""

import asyncio
import logging
from typing import Any, Dict, Set

from sync.channel import Channel, DISCONNECTED_STATUSES, Handler, SUBSCRIBED

logger = logging.getLogger(__name__)


def _unwrap(message: Any) -> Any:
    """Realtime hands over the whole broadcast envelope; keep just the payload."""
    if isinstance(message, dict) and "event" in message and isinstance(message.get("payload"), dict):
        return message["payload"]
    return message


class SupabaseRealtimeChannel(Channel):
    """
    Args:
        client: an async supabase client (see services.supabase_client)
    """

    def __init__(self, client):
        super().__init__()
        self.client = client
        self._channels: Dict[str, Any] = {}
        self._connected: Set[str] = set()
        self._pending: Set[asyncio.Task] = set()

    @classmethod
    async def create(cls) -> "SupabaseRealtimeChannel":
        from services.supabase_client import get_async_supabase_client
        return cls(await get_async_supabase_client())

    def _realtime_channel(self, topic: str):
        if topic not in self._channels:
            channel = self.client.channel(topic)
            # Presence bindings must exist before the channel joins.
            channel.on_presence_join(
                lambda key, current, new_presences: self._presence_joined(topic, new_presences)
            )
            self._channels[topic] = channel
        return self._channels[topic]

    def _presence_joined(self, topic: str, new_presences) -> None:
        for state in new_presences or []:
            self._emit_presence(topic, state)

    def is_connected(self, topic: str) -> bool:
        return topic in self._connected

    def subscribe(self, topic: str, event_name: str, handler: Handler) -> None:
        channel = self._realtime_channel(topic)
        channel.on_broadcast(event_name, lambda message: handler(_unwrap(message)))

    async def connect(self, topic: str) -> None:
        """
        Join the realtime channel and wait for SUBSCRIBED.

        Raises:
            ConnectionError: If the join ends in CLOSED, CHANNEL_ERROR or TIMED_OUT
        """
        channel = self._realtime_channel(topic)
        subscribed = asyncio.get_running_loop().create_future()

        def on_subscribe(status, err=None):
            status_name = getattr(status, "value", status)
            if status_name == SUBSCRIBED:
                self._connected.add(topic)
                if not subscribed.done():
                    subscribed.set_result(None)
            elif status_name in DISCONNECTED_STATUSES:
                self._connected.discard(topic)
                if not subscribed.done():
                    subscribed.set_exception(
                        ConnectionError(f"Realtime join for {topic} failed: {status_name} {err or ''}".strip())
                    )
            self._emit_status(topic, status_name)

        await channel.subscribe(on_subscribe)
        await subscribed

    def publish(self, topic: str, event_name: str, payload: Dict[str, Any]) -> None:
        channel = self._channels.get(topic)
        if channel is None:
            raise RuntimeError(f"Not subscribed to {topic}")
        task = asyncio.get_running_loop().create_task(channel.send_broadcast(event_name, payload))
        self._pending.add(task)
        task.add_done_callback(self._publish_done)

    def track(self, topic: str, state: Dict[str, Any]) -> None:
        channel = self._channels.get(topic)
        if channel is None:
            raise RuntimeError(f"Not subscribed to {topic}")
        task = asyncio.get_running_loop().create_task(channel.track(state))
        self._pending.add(task)
        task.add_done_callback(self._publish_done)

    def _publish_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Realtime request failed: {exc}")

    def unsubscribe(self, topic: str) -> None:
        channel = self._channels.pop(topic, None)
        self._connected.discard(topic)
        if channel is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running loop; realtime channel {topic} left for the client to close")
            return
        task = loop.create_task(self.client.remove_channel(channel))
        self._pending.add(task)
        task.add_done_callback(self._publish_done)

    async def close(self) -> None:
        """Flush outstanding sends and leave every channel."""
        for topic in list(self._channels):
            self.unsubscribe(topic)
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
