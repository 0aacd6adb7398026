"""
Data access layer for match records.

This module exposes the MatchStore interface, its Supabase, Postgres and
in-memory implementations, and a factory that picks one from the
environment.
"""

import os
from typing import Optional

from .match_store import (
    FINISHED,
    PLAYING,
    WAITING,
    InMemoryMatchStore,
    MatchRecord,
    MatchStore,
)

BACKENDS = ("supabase", "postgres", "memory")


def create_match_store(backend: Optional[str] = None) -> MatchStore:
    """
    Build a MatchStore.

    Args:
        backend: 'supabase', 'postgres' or 'memory'. Defaults to the
                 MATCH_STORE_BACKEND environment variable, then 'supabase'.

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = (backend or os.getenv("MATCH_STORE_BACKEND") or "supabase").lower()

    if backend == "supabase":
        from .supabase_match_store import SupabaseMatchStore
        return SupabaseMatchStore()
    if backend == "postgres":
        from .repositories import MatchRepository
        return MatchRepository()
    if backend == "memory":
        return InMemoryMatchStore()

    raise ValueError(f"Unknown match store backend: {backend!r} (expected one of {BACKENDS})")


__all__ = [
    'FINISHED',
    'PLAYING',
    'WAITING',
    'InMemoryMatchStore',
    'MatchRecord',
    'MatchStore',
    'create_match_store',
]
