"""
Fixed-rate cooperative clock.

Runs as an asyncio task on the same loop that delivers channel messages, so
a tick callback never interleaves with a message handler.
"""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class SimulationClock:
    """
    Counts down, then calls ``on_tick`` every ``interval`` seconds.

    Args:
        interval: seconds between ticks
        on_tick: called once per tick
        countdown_seconds: whole seconds to wait before the first tick
        on_countdown: called with 3, 2, 1 ... and finally 0 when ticking begins
    """

    def __init__(
        self,
        interval: float,
        on_tick: Callable[[], None],
        countdown_seconds: int = 0,
        on_countdown: Optional[Callable[[int], None]] = None,
        second: float = 1.0,
    ):
        self.interval = interval
        self.on_tick = on_tick
        self.countdown_seconds = countdown_seconds
        self.on_countdown = on_countdown
        self.second = second
        self.ticks = 0
        self._task: Optional[asyncio.Task] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> asyncio.Task:
        """Schedule the clock on the running loop. Starting twice is an error."""
        if self._task is not None:
            raise RuntimeError("SimulationClock already started")
        self._running = True
        self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    def stop(self) -> None:
        """Halt the clock. Safe to call repeatedly, including from on_tick."""
        self._running = False
        if self._task is not None and not self._task.done():
            current = None
            try:
                current = asyncio.current_task()
            except RuntimeError:
                pass
            # From inside on_tick the loop exits on its own at the next check.
            if current is not self._task:
                self._task.cancel()

    async def wait(self) -> None:
        """Wait until the clock task finishes or is cancelled."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()

        for remaining in range(self.countdown_seconds, 0, -1):
            if not self._running:
                return
            self._notify_countdown(remaining)
            await asyncio.sleep(self.second)

        if not self._running:
            return
        self._notify_countdown(0)

        # Deadlines are computed from the start so slow ticks do not drift.
        next_deadline = loop.time() + self.interval
        while self._running:
            delay = next_deadline - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            if not self._running:
                break
            self.ticks += 1
            self.on_tick()
            next_deadline += self.interval
            if next_deadline < loop.time():
                # Fell behind by more than a tick; skip rather than burst.
                next_deadline = loop.time() + self.interval

    def _notify_countdown(self, remaining: int) -> None:
        if self.on_countdown is not None:
            self.on_countdown(remaining)
