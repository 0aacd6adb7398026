"""
MatchStore backed by the Supabase ``games`` table.
"""

import logging
from typing import Any, Dict, Optional

from .match_store import (
    WAITING,
    MatchRecord,
    MatchStore,
    normalize_code,
    validate_update_fields,
)

logger = logging.getLogger(__name__)

TABLE = "games"


class SupabaseMatchStore(MatchStore):
    """
    Reads and writes match rows through the Supabase client.

    Args:
        client: a supabase Client; defaults to the shared service-role client
    """

    def __init__(self, client=None):
        if client is None:
            from services.supabase_client import get_supabase_client
            client = get_supabase_client()
        self.client = client

    def create_match(self, code: str, host_id: str) -> str:
        result = (
            self.client.table(TABLE)
            .insert({
                "code": normalize_code(code),
                "player1_id": host_id,
                "status": WAITING,
            })
            .execute()
        )
        if not result.data:
            raise RuntimeError(f"Supabase returned no row for new match {code}")
        match_id = str(result.data[0]["id"])
        logger.info(f"Created match {match_id} with code {normalize_code(code)}")
        return match_id

    def find_waiting_match(self, code: str) -> Optional[MatchRecord]:
        result = (
            self.client.table(TABLE)
            .select("*")
            .eq("code", normalize_code(code))
            .eq("status", WAITING)
            .limit(1)
            .execute()
        )
        if not result.data:
            return None
        return MatchRecord.from_row(result.data[0])

    def update_match(self, match_id: str, fields: Dict[str, Any]) -> None:
        cleaned = validate_update_fields(fields)
        self.client.table(TABLE).update(cleaned).eq("id", match_id).execute()
        logger.info(f"Updated match {match_id}: {cleaned}")
