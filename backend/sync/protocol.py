"""
SyncProtocol: local decisions out, remote facts in.

Outbound it turns direction changes, food placement and game-over into
channel broadcasts. Inbound it validates payloads, drops anything
malformed or echoed back, and hands typed events to the owner.
"""

import logging
from functools import partial
from typing import Any, Callable, Dict, Optional, Tuple

from domain.constants import GRID_SIZE, HOST, ROLES
from .channel import Channel
from .messages import (
    DIRECTION_CHANGE,
    EVENT_NAMES,
    FOOD_PLACED,
    GAME_OVER,
    FoodPlaced,
    MalformedMessage,
    RemoteEvent,
    decode,
    decode_presence,
    encode_direction_change,
    encode_food_placed,
    encode_game_over,
    encode_presence,
)

logger = logging.getLogger(__name__)


class SyncProtocol:
    """
    Fire-and-forget broadcast protocol for one player in one match.

    There is no sequencing or acknowledgement: every message carries
    absolute state, so applying it twice or out of order is safe.

    Attributes:
        received: number of remote events handed to ``on_event``
        dropped: number of remote payloads rejected as malformed or foreign
    """

    def __init__(
        self,
        channel: Channel,
        topic: str,
        local_player_id: str,
        local_role: str,
        on_event: Callable[[RemoteEvent], None],
        grid_size: int = GRID_SIZE,
    ):
        if local_role not in ROLES:
            raise ValueError(f"Unknown role: {local_role!r}")
        self.channel = channel
        self.topic = topic
        self.local_player_id = local_player_id
        self.local_role = local_role
        self.on_event = on_event
        self.grid_size = grid_size
        self.received = 0
        self.dropped = 0
        self._attached = False
        self._remove_presence_callback: Optional[Callable[[], None]] = None

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        if self._attached:
            return
        for event_name in EVENT_NAMES:
            self.channel.subscribe(self.topic, event_name, partial(self._receive, event_name))
        self._remove_presence_callback = self.channel.on_presence(self._receive_presence)
        self._attached = True

    def detach(self) -> None:
        if not self._attached:
            return
        self._attached = False
        if self._remove_presence_callback is not None:
            self._remove_presence_callback()
            self._remove_presence_callback = None
        self.channel.unsubscribe(self.topic)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def publish_direction(self, direction: str) -> None:
        self._publish(DIRECTION_CHANGE, encode_direction_change(self.local_player_id, direction))

    def publish_food(self, coordinate: Tuple[int, int]) -> None:
        if self.local_role != HOST:
            raise RuntimeError("Only the host places food")
        self._publish(FOOD_PLACED, encode_food_placed(self.local_player_id, coordinate))

    def publish_game_over(self, winner_id: Optional[str], winner_role: Optional[str]) -> None:
        self._publish(GAME_OVER, encode_game_over(self.local_player_id, winner_id, winner_role))

    def announce_presence(self) -> None:
        """Track this player on the topic so the peer learns its id and role."""
        try:
            self.channel.track(self.topic, encode_presence(self.local_player_id, self.local_role))
        except Exception as e:
            logger.error(f"Failed to track presence on {self.topic}: {e}")

    def _publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        try:
            self.channel.publish(self.topic, event_name, payload)
        except Exception as e:
            logger.error(f"Failed to publish {event_name} on {self.topic}: {e}")

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def _receive(self, event_name: str, payload: Any) -> None:
        if not self._attached:
            return

        try:
            event = decode(event_name, payload, self.grid_size)
        except MalformedMessage as e:
            self.dropped += 1
            logger.warning(f"Dropping malformed {event_name} message on {self.topic}: {e}")
            return

        if event.player_id == self.local_player_id:
            logger.debug(f"Ignoring own {event_name} echo")
            return

        if isinstance(event, FoodPlaced) and self.local_role == HOST:
            self.dropped += 1
            logger.warning(f"Ignoring food placement from non-host {event.player_id}")
            return

        self.received += 1
        self.on_event(event)

    def _receive_presence(self, topic: str, state: Any) -> None:
        if not self._attached or topic != self.topic:
            return

        try:
            event = decode_presence(state)
        except MalformedMessage as e:
            self.dropped += 1
            logger.warning(f"Dropping malformed presence on {self.topic}: {e}")
            return

        if event.player_id == self.local_player_id:
            return

        logger.info(f"Player {event.player_id} ({event.role}) present on {self.topic}")
        self.received += 1
        self.on_event(event)
