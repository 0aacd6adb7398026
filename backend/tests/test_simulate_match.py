"""
Smoke test for the bot-vs-bot simulation script.
"""

import argparse
import asyncio
import os
import random
import sys

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cli.simulate_match import CODE_ALPHABET, generate_code, run_match
from domain.constants import ENDED, GUEST, HOST, RUNNING


def make_args(**overrides):
    values = dict(
        code="abc123",
        seed=3,
        tick_ms=1,
        countdown=0,
        wrap=False,
        channel="memory",
        store="memory",
        max_ticks=300,
    )
    values.update(overrides)
    return argparse.Namespace(**values)


class TestSimulateMatch:
    """Two bots over the in-memory broker."""

    def test_match_runs_to_a_result_or_tick_limit(self, capsys):
        result = asyncio.run(run_match(make_args()))

        assert result["code"] == "abc123"
        assert result["phase"] in (RUNNING, ENDED)
        assert result["ticks"] <= 300
        assert result["winner_role"] in (HOST, GUEST, None)
        assert "Result after" in capsys.readouterr().out

    def test_generated_codes(self):
        code = generate_code(random.Random(1))
        assert len(code) == 6
        assert all(c in CODE_ALPHABET for c in code)
