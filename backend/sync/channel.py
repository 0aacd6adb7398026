"""
Publish/subscribe channel abstraction scoped to a match topic.

Broadcasts are fire-and-forget. Delivery is assumed to be at-least-once and
possibly reordered or duplicated. Presence lets each endpoint announce who
it is once per connection, so peers learn ids before any broadcast.
"""

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], None]
StatusCallback = Callable[[str, str], None]
PresenceCallback = Callable[[str, Dict[str, Any]], None]

# Connection statuses, named after Supabase Realtime's subscribe states.
SUBSCRIBED = "SUBSCRIBED"
CLOSED = "CLOSED"
CHANNEL_ERROR = "CHANNEL_ERROR"
TIMED_OUT = "TIMED_OUT"
DISCONNECTED_STATUSES = {CLOSED, CHANNEL_ERROR, TIMED_OUT}


class Channel(ABC):
    """Base class for match channels."""

    def __init__(self):
        self._status_callbacks: List[StatusCallback] = []
        self._presence_callbacks: List[PresenceCallback] = []

    @abstractmethod
    def subscribe(self, topic: str, event_name: str, handler: Handler) -> None:
        """Register ``handler`` for ``event_name`` broadcasts on ``topic``."""

    @abstractmethod
    def unsubscribe(self, topic: str) -> None:
        """Drop every handler registered on ``topic``. Idempotent."""

    @abstractmethod
    def publish(self, topic: str, event_name: str, payload: Dict[str, Any]) -> None:
        """Broadcast without waiting for delivery."""

    @abstractmethod
    async def connect(self, topic: str) -> None:
        """Resolve once the subscription on ``topic`` is established."""

    @abstractmethod
    def track(self, topic: str, state: Dict[str, Any]) -> None:
        """Announce ``state`` as this endpoint's presence on ``topic``. Fire-and-forget."""

    def on_status(self, callback: StatusCallback) -> Callable[[], None]:
        """
        Register a connection lifecycle callback ``callback(topic, status)``.

        Returns a function that removes the callback again.
        """
        self._status_callbacks.append(callback)

        def remove():
            if callback in self._status_callbacks:
                self._status_callbacks.remove(callback)

        return remove

    def on_presence(self, callback: PresenceCallback) -> Callable[[], None]:
        """
        Register ``callback(topic, state)`` for every presence another
        endpoint tracks on a topic this endpoint is connected to.

        Returns a function that removes the callback again.
        """
        self._presence_callbacks.append(callback)

        def remove():
            if callback in self._presence_callbacks:
                self._presence_callbacks.remove(callback)

        return remove

    def _emit_presence(self, topic: str, state: Dict[str, Any]) -> None:
        logger.debug(f"Presence on {topic}: {state}")
        for callback in list(self._presence_callbacks):
            try:
                callback(topic, state)
            except Exception:
                logger.exception("Presence callback failed")

    def _emit_status(self, topic: str, status: str) -> None:
        logger.info(f"Channel {topic} status: {status}")
        for callback in list(self._status_callbacks):
            try:
                callback(topic, status)
            except Exception:
                logger.exception("Channel status callback failed")


class InMemoryBroker:
    """
    In-process message bus shared by any number of InMemoryChannels.

    Delivery is synchronous and skips the sender, like a realtime broadcast
    with self-echo turned off. ``hold``/``release`` let callers delay a batch
    of messages and then flush it reordered or duplicated.
    """

    def __init__(self):
        self._subscriptions: Dict[str, List[Tuple["InMemoryChannel", str, Handler]]] = {}
        self._held: Optional[List[Tuple["InMemoryChannel", str, str, Dict[str, Any]]]] = None
        self.published: List[Tuple[str, str, Dict[str, Any]]] = []
        self._presence: Dict[str, List[Tuple["InMemoryChannel", Dict[str, Any]]]] = {}

    def channel(self) -> "InMemoryChannel":
        return InMemoryChannel(self)

    def hold(self) -> None:
        """Buffer every publish until ``release``."""
        if self._held is None:
            self._held = []

    def release(self, reverse: bool = False, duplicate: bool = False) -> int:
        """
        Deliver held messages and stop buffering.

        Returns:
            Number of deliveries attempted
        """
        held, self._held = self._held or [], None
        if reverse:
            held = list(reversed(held))
        delivered = 0
        for sender, topic, event_name, payload in held:
            for _ in range(2 if duplicate else 1):
                self._deliver(sender, topic, event_name, payload)
                delivered += 1
        return delivered

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscriptions.get(topic, []))

    def presences(self, topic: str) -> List[Dict[str, Any]]:
        return [copy.deepcopy(state) for _, state in self._presence.get(topic, [])]

    def _register(self, channel: "InMemoryChannel", topic: str, event_name: str, handler: Handler) -> None:
        self._subscriptions.setdefault(topic, []).append((channel, event_name, handler))

    def _remove(self, channel: "InMemoryChannel", topic: str) -> None:
        remaining = [entry for entry in self._subscriptions.get(topic, []) if entry[0] is not channel]
        if remaining:
            self._subscriptions[topic] = remaining
        else:
            self._subscriptions.pop(topic, None)

    def _publish(self, sender: "InMemoryChannel", topic: str, event_name: str, payload: Dict[str, Any]) -> None:
        payload = copy.deepcopy(payload)
        self.published.append((topic, event_name, payload))
        if self._held is not None:
            self._held.append((sender, topic, event_name, payload))
            return
        self._deliver(sender, topic, event_name, payload)

    def _deliver(self, sender: "InMemoryChannel", topic: str, event_name: str, payload: Dict[str, Any]) -> None:
        for channel, subscribed_event, handler in list(self._subscriptions.get(topic, [])):
            if channel is sender or subscribed_event != event_name:
                continue
            if not channel.is_connected(topic):
                continue
            handler(copy.deepcopy(payload))

    def _track(self, channel: "InMemoryChannel", topic: str, state: Dict[str, Any]) -> None:
        state = copy.deepcopy(state)
        entries = [entry for entry in self._presence.get(topic, []) if entry[0] is not channel]
        entries.append((channel, state))
        self._presence[topic] = entries
        for other, _ in entries:
            if other is not channel and other.is_connected(topic):
                other._emit_presence(topic, copy.deepcopy(state))

    def _untrack(self, channel: "InMemoryChannel", topic: str) -> None:
        remaining = [entry for entry in self._presence.get(topic, []) if entry[0] is not channel]
        if remaining:
            self._presence[topic] = remaining
        else:
            self._presence.pop(topic, None)

    def _replay_presence(self, channel: "InMemoryChannel", topic: str) -> None:
        """Presence state is synced to a channel as soon as it joins."""
        for other, state in list(self._presence.get(topic, [])):
            if other is not channel:
                channel._emit_presence(topic, copy.deepcopy(state))


class InMemoryChannel(Channel):
    """Channel endpoint attached to an InMemoryBroker."""

    def __init__(self, broker: InMemoryBroker):
        super().__init__()
        self.broker = broker
        self._connected: Set[str] = set()

    def subscribe(self, topic: str, event_name: str, handler: Handler) -> None:
        self.broker._register(self, topic, event_name, handler)

    def unsubscribe(self, topic: str) -> None:
        self.broker._remove(self, topic)
        self.broker._untrack(self, topic)
        self._connected.discard(topic)

    def publish(self, topic: str, event_name: str, payload: Dict[str, Any]) -> None:
        self.broker._publish(self, topic, event_name, payload)

    async def connect(self, topic: str) -> None:
        self._connected.add(topic)
        self._emit_status(topic, SUBSCRIBED)
        self.broker._replay_presence(self, topic)

    def track(self, topic: str, state: Dict[str, Any]) -> None:
        self.broker._track(self, topic, state)

    def disconnect(self, topic: str) -> None:
        """Simulate the transport dropping; handlers stay registered but go quiet."""
        if topic in self._connected:
            self._connected.discard(topic)
            self._emit_status(topic, CLOSED)

    def is_connected(self, topic: str) -> bool:
        return topic in self._connected
