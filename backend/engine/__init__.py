"""
Simulation engine: input buffering, tick resolution and the tick clock.
"""

from .input_queue import InputQueue
from .tick import TickOutcome, resolve_tick
from .clock import SimulationClock

__all__ = ['InputQueue', 'TickOutcome', 'resolve_tick', 'SimulationClock']
