"""
MatchController: owns one match from countdown to the final result.

It holds the only mutable MatchState, wires the InputQueue, SimulationClock
and SyncProtocol together, and publishes immutable GameState snapshots to
listeners (rendering, replay recorders, the CLI).

All entry points run on a single asyncio loop. Remote events that arrive
while a tick is being resolved are queued and applied right after it.
"""

import asyncio
import logging
import random
from collections import deque
from dataclasses import dataclass
from typing import Callable, List, Optional

from config import Settings
from data_access.match_store import FINISHED, MatchStore
from domain.constants import (
    DEATH_HEAD,
    ENDED,
    HOST,
    ROLES,
    RUNNING,
    STARTING,
    opponent_of,
)
from domain.game_state import GameState, MatchState
from domain.geometry import random_free_cell
from engine.clock import SimulationClock
from engine.input_queue import InputQueue
from engine.tick import resolve_tick
from sync.channel import Channel, DISCONNECTED_STATUSES
from sync.messages import DirectionChange, FoodPlaced, GameOver, PresenceJoined, RemoteEvent
from sync.protocol import SyncProtocol

logger = logging.getLogger(__name__)

STORE_WRITE_FAILED = "store-write-failed"
CHANNEL_DISCONNECTED = "channel-disconnected"

StateListener = Callable[[GameState], None]


@dataclass(frozen=True)
class MatchWarning:
    """Non-fatal problem reported to ``on_warning`` listeners."""

    kind: str
    message: str
    error: Optional[BaseException] = None


class MatchController:
    """
    Runs one player's side of a two-player match.

    Args:
        store: where the host records the final result (optional)
        settings: grid size, tick rate, countdown, wall mode
        rng: random source for food placement

    Attributes:
        end_transitions: how many times the match entered ENDED (0 or 1)
    """

    def __init__(
        self,
        store: Optional[MatchStore] = None,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.settings = settings or Settings()
        self.rng = rng or random.Random()

        self.match_id: Optional[str] = None
        self.local_player_id: Optional[str] = None
        self.topic: Optional[str] = None
        self._role: Optional[str] = None

        self._state: Optional[MatchState] = None
        self._queue: Optional[InputQueue] = None
        self._protocol: Optional[SyncProtocol] = None
        self._clock: Optional[SimulationClock] = None
        self._remove_status_callback: Optional[Callable[[], None]] = None

        self._state_listeners: List[StateListener] = []
        self._warning_listeners: List[Callable[[MatchWarning], None]] = []

        self._in_tick = False
        self._deferred = deque()
        self._started = False
        self._stopped = False
        self._finished: Optional[asyncio.Event] = None

        self.end_transitions = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def role(self) -> Optional[str]:
        return self._role

    @property
    def state(self) -> Optional[GameState]:
        """Current snapshot, or None before ``start``."""
        return self._state.snapshot() if self._state is not None else None

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def protocol(self) -> Optional[SyncProtocol]:
        return self._protocol

    def is_authoritative(self) -> bool:
        """The host places food and writes the final result."""
        return self._role == HOST

    def on_state_change(self, listener: StateListener) -> Callable[[], None]:
        """Register a snapshot listener; returns a function that removes it."""
        self._state_listeners.append(listener)
        return lambda: self._remove(self._state_listeners, listener)

    def on_warning(self, listener: Callable[[MatchWarning], None]) -> Callable[[], None]:
        self._warning_listeners.append(listener)
        return lambda: self._remove(self._warning_listeners, listener)

    async def start(
        self,
        match_id: str,
        local_player_id: str,
        role: str,
        channel: Channel,
        code: Optional[str] = None,
        opponent_id: Optional[str] = None,
    ) -> None:
        """
        Set up the match and begin the countdown.

        Returns once the channel subscription is live and the clock is armed.
        The topic is derived from ``code`` (falling back to ``match_id``).

        Raises:
            RuntimeError: If the controller was already started
            ValueError: If ``role`` is not 'host' or 'guest'
        """
        if self._started:
            raise RuntimeError("MatchController.start() called twice")
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role!r}")
        self._started = True

        self.match_id = match_id
        self.local_player_id = local_player_id
        self._role = role
        self.topic = self.settings.topic_for(code or match_id)
        self._finished = asyncio.Event()

        host_id, guest_id = (local_player_id, opponent_id) if role == HOST else (opponent_id, local_player_id)
        self._state = MatchState.initial(
            host_id,
            guest_id,
            grid_size=self.settings.grid_size,
            countdown=self.settings.countdown_seconds,
        )
        self._queue = InputQueue(self._state.slot(role).direction)

        self._protocol = SyncProtocol(
            channel,
            self.topic,
            local_player_id,
            role,
            self.apply_remote_event,
            grid_size=self.settings.grid_size,
        )
        self._protocol.attach()
        self._remove_status_callback = channel.on_status(self._on_channel_status)

        logger.info(f"Starting match {match_id} as {role} ({local_player_id}) on {self.topic}")
        try:
            await channel.connect(self.topic)
        except Exception:
            self.stop()
            raise

        if self._stopped:
            return
        self._protocol.announce_presence()

        self._clock = SimulationClock(
            self.settings.tick_interval,
            self.apply_tick,
            countdown_seconds=self.settings.countdown_seconds,
            on_countdown=self._on_countdown,
        )
        if self.settings.countdown_seconds == 0:
            self._on_countdown(0)
        else:
            self._emit()
        self._clock.start()

    def stop(self) -> None:
        """
        Detach from the channel and halt the clock.

        Safe to call any number of times, from any phase.
        """
        if self._stopped:
            return
        self._stopped = True

        if self._clock is not None:
            self._clock.stop()
        if self._protocol is not None:
            self._protocol.detach()
        if self._remove_status_callback is not None:
            self._remove_status_callback()
            self._remove_status_callback = None
        if self._queue is not None:
            self._queue.clear()
        self._deferred.clear()
        if self._finished is not None:
            self._finished.set()

        logger.info(f"Stopped match {self.match_id}")

    async def wait_finished(self) -> None:
        """Wait until the match ends or the controller is stopped."""
        if self._finished is None:
            raise RuntimeError("MatchController has not been started")
        await self._finished.wait()

    def enqueue_direction(self, direction: str) -> bool:
        """
        Input source entry point for the local player.

        Returns False (never raises) when the input is filtered: reversals,
        unknown directions, or any input outside RUNNING.
        """
        if self._state is None or self._stopped or self._state.phase != RUNNING:
            return False
        return self._queue.enqueue(direction)

    # ------------------------------------------------------------------
    # Mutation entry points
    # ------------------------------------------------------------------

    def apply_tick(self) -> None:
        """Advance the simulation by one tick. No-op unless RUNNING."""
        if self._state is None or self._stopped or self._state.phase != RUNNING:
            return

        self._in_tick = True
        try:
            self._run_tick()
        finally:
            self._in_tick = False
        self._apply_deferred()

    def apply_remote_event(self, event: RemoteEvent) -> None:
        """Apply a validated event from the opponent."""
        if self._in_tick:
            self._deferred.append(event)
            return
        if self._state is None or self._stopped:
            return
        if self._state.phase == ENDED:
            logger.debug(f"Match {self.match_id} already ended; ignoring {type(event).__name__}")
            return

        if isinstance(event, PresenceJoined) and event.role == self._role:
            logger.warning(f"Ignoring presence of {event.player_id} claiming our role {event.role}")
            return

        opponent = self._state.slot(opponent_of(self._role))
        if opponent.player_id is None:
            opponent.player_id = event.player_id
            logger.info(f"Opponent identified as {event.player_id}")
        elif event.player_id != opponent.player_id:
            logger.warning(f"Ignoring event from unknown player {event.player_id}")
            return

        if isinstance(event, DirectionChange):
            # Absolute overwrite, no reversal check: the sender validated it.
            opponent.direction = event.direction
            self._emit()
        elif isinstance(event, FoodPlaced):
            self._state.food = event.coordinate
            self._emit()
        elif isinstance(event, GameOver):
            self._finish(self._resolve_winner(event), event.winner_role, announce=False)
        elif isinstance(event, PresenceJoined):
            self._emit()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run_tick(self) -> None:
        state = self._state
        local = state.slot(self._role)
        opponent = state.slot(opponent_of(self._role))

        drained = self._queue.drain()
        outcome = resolve_tick(state.snapshot(), self._role, drained, self.settings.wrap_walls)

        if outcome.accepted_direction is not None:
            local.direction = outcome.accepted_direction
            self._protocol.publish_direction(outcome.accepted_direction)
        elif drained is not None:
            self._queue.rebase(local.direction)

        state.tick += 1

        if outcome.local_died:
            local.snake.kill(outcome.death_reason, state.tick)
            if outcome.head_to_head:
                opponent.snake.kill(DEATH_HEAD, state.tick)
                self._finish(None, None, announce=True)
            else:
                self._finish(opponent.player_id, opponent.role, announce=True)
            return

        for role in ROLES:
            slot = state.slot(role)
            slot.snake.replace_body(outcome.new_bodies[role])
            if outcome.captures[role]:
                slot.score += 1

        if outcome.any_capture and self.is_authoritative():
            self._place_food()

        self._emit()

    def _place_food(self) -> None:
        cell = random_free_cell(self._state.occupied_cells(), self._state.grid_size, self.rng)
        if cell is None:
            logger.warning("No free cell left for food")
            return
        self._state.food = cell
        self._protocol.publish_food(cell)

    def _resolve_winner(self, event: GameOver) -> Optional[str]:
        if event.winner_role is None:
            return event.winner_id
        return self._state.slot(event.winner_role).player_id or event.winner_id

    def _finish(self, winner_id: Optional[str], winner_role: Optional[str], announce: bool) -> None:
        state = self._state
        if state.phase == ENDED:
            return

        state.phase = ENDED
        state.winner_id = winner_id
        state.winner_role = winner_role
        self.end_transitions += 1

        outcome = f"winner {winner_id or winner_role}" if winner_role or winner_id else "draw"
        logger.info(f"Match {self.match_id} ended at tick {state.tick}: {outcome}")

        if self._clock is not None:
            self._clock.stop()
        self._queue.clear()

        if announce:
            self._protocol.publish_game_over(winner_id, winner_role)
        if self.is_authoritative():
            self._persist_result(winner_id)

        self._emit()
        if self._finished is not None:
            self._finished.set()

    def _persist_result(self, winner_id: Optional[str]) -> None:
        """Single attempt; failure is reported, the match stays ENDED."""
        if self.store is None:
            return
        try:
            self.store.update_match(self.match_id, {"status": FINISHED, "winner_id": winner_id})
        except Exception as e:
            logger.error(f"Error persisting result of match {self.match_id}: {e}")
            self._warn(MatchWarning(STORE_WRITE_FAILED, f"Could not record match result: {e}", e))

    def _on_countdown(self, remaining: int) -> None:
        if self._state is None or self._stopped or self._state.phase != STARTING:
            return
        self._state.countdown = remaining
        if remaining == 0:
            self._state.phase = RUNNING
            logger.info(f"Match {self.match_id} running")
        self._emit()

    def _on_channel_status(self, topic: str, status: str) -> None:
        if status not in DISCONNECTED_STATUSES or self._stopped:
            return
        if self._state is not None and self._state.phase == ENDED:
            return
        self._warn(MatchWarning(CHANNEL_DISCONNECTED, f"Channel {topic} reported {status}"))

    def _apply_deferred(self) -> None:
        while self._deferred:
            self.apply_remote_event(self._deferred.popleft())

    def _emit(self) -> None:
        snapshot = self._state.snapshot()
        for listener in list(self._state_listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("State listener failed")

    def _warn(self, warning: MatchWarning) -> None:
        logger.warning(f"{warning.kind}: {warning.message}")
        for listener in list(self._warning_listeners):
            try:
                listener(warning)
            except Exception:
                logger.exception("Warning listener failed")

    @staticmethod
    def _remove(listeners: list, listener) -> None:
        if listener in listeners:
            listeners.remove(listener)
