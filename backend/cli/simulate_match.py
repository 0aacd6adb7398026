#!/usr/bin/env python3
"""
Simulate a full duel between two random bots.

Runs a host and a guest MatchController in one event loop, each driven by
a RandomPlayer, connected through the in-memory broker or through Supabase
Realtime. The host records the result in the selected match store.
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import os
import random
import string
import sys
import uuid
from typing import Any, Dict, Tuple

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

from config import Settings
from data_access import PLAYING, create_match_store
from domain.constants import GUEST, HOST
from match_controller import MatchController
from players import RandomPlayer, drive
from sync.channel import Channel, InMemoryBroker

CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_code(rng: random.Random, length: int = 6) -> str:
    return "".join(rng.choice(CODE_ALPHABET) for _ in range(length))


async def open_channels(kind: str) -> Tuple[Channel, Channel]:
    """Return one channel endpoint per player."""
    if kind == "memory":
        broker = InMemoryBroker()
        return broker.channel(), broker.channel()

    from services.realtime_channel import SupabaseRealtimeChannel
    return await SupabaseRealtimeChannel.create(), await SupabaseRealtimeChannel.create()


def stop_after(controller: MatchController, max_ticks: int):
    def on_state(state):
        if state.tick >= max_ticks:
            controller.stop()
    return controller.on_state_change(on_state)


async def run_match(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Play one match to the end.

    Returns:
        A summary dict with match id, code, winner and scores
    """
    settings = dataclasses.replace(
        Settings.from_env(),
        tick_interval=args.tick_ms / 1000.0,
        countdown_seconds=args.countdown,
        wrap_walls=args.wrap,
    )
    rng = random.Random(args.seed)
    store = create_match_store(args.store)

    code = args.code or generate_code(rng)
    host_id = str(uuid.uuid4())
    guest_id = str(uuid.uuid4())

    match_id = store.create_match(code, host_id)
    store.update_match(match_id, {"player2_id": guest_id, "status": PLAYING})
    print(f"Match {match_id} (code {code})")

    host_channel, guest_channel = await open_channels(args.channel)

    host = MatchController(store=store, settings=settings, rng=random.Random(rng.random()))
    guest = MatchController(settings=settings, rng=random.Random(rng.random()))

    for controller, role in ((host, HOST), (guest, GUEST)):
        drive(controller, RandomPlayer(role, rng=random.Random(rng.random()), wrap_walls=settings.wrap_walls))
        stop_after(controller, args.max_ticks)
        controller.on_warning(lambda warning, role=role: print(f"[{role}] Warning: {warning.message}"))

    await host.start(match_id, host_id, HOST, host_channel, code=code, opponent_id=guest_id)
    await guest.start(match_id, guest_id, GUEST, guest_channel, code=code, opponent_id=host_id)

    try:
        await asyncio.gather(host.wait_finished(), guest.wait_finished())
    finally:
        host.stop()
        guest.stop()
        for channel in (host_channel, guest_channel):
            close = getattr(channel, "close", None)
            if close is not None:
                await close()

    final = host.state
    print("\n" + final.print_board() + "\n")

    if final.winner_role is None and final.winner_id is None:
        print(f"Result after {final.tick} ticks: {final.phase.lower()}, no winner")
    else:
        print(f"Result after {final.tick} ticks: {final.winner_role} wins ({final.winner_id})")

    return {
        "match_id": match_id,
        "code": code,
        "phase": final.phase,
        "ticks": final.tick,
        "winner_id": final.winner_id,
        "winner_role": final.winner_role,
        "scores": {HOST: final.host.score, GUEST: final.guest.score},
        "guest_winner_role": guest.state.winner_role,
    }


def main():
    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Simulate a bot-vs-bot duel snake match")
    parser.add_argument("--code", type=str, default=None, help="Room code (random if omitted)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for bots, codes and food")
    parser.add_argument("--tick-ms", type=int, default=20, help="Tick interval in milliseconds (default: 20)")
    parser.add_argument("--countdown", type=int, default=0, help="Countdown seconds before play (default: 0)")
    parser.add_argument("--wrap", action="store_true", help="Wrap around the board edges instead of dying")
    parser.add_argument("--channel", choices=("memory", "supabase"), default="memory",
                        help="Transport between the two players (default: memory)")
    parser.add_argument("--store", choices=("memory", "supabase", "postgres"), default="memory",
                        help="Where the host records the result (default: memory)")
    parser.add_argument("--max-ticks", type=int, default=2000,
                        help="Stop both players after this many ticks (default: 2000)")

    args = parser.parse_args()

    result = asyncio.run(run_match(args))

    print("\nSimulation Result Summary:")
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
