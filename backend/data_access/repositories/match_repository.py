"""
Match repository: the games table over a direct Postgres connection.
"""

from typing import Any, Dict, Optional

from ..match_store import (
    UPDATABLE_FIELDS,
    WAITING,
    MatchRecord,
    MatchStore,
    normalize_code,
    validate_update_fields,
)
from .base import BaseRepository

_COLUMNS = "id, code, status, player1_id, player2_id, winner_id"


class MatchRepository(BaseRepository, MatchStore):
    """
    Repository for games table operations.
    """

    def create_match(self, code: str, host_id: str) -> str:
        """
        Insert a waiting match.

        Args:
            code: Room code shared with the opponent
            host_id: Player id of the host (player1)

        Returns:
            The new match id
        """
        with self.connection() as (conn, cursor):
            cursor.execute("""
                INSERT INTO games (code, player1_id, status)
                VALUES (%s, %s, %s)
                RETURNING id
            """, (normalize_code(code), host_id, WAITING))
            row = cursor.fetchone()
            match_id = str(row["id"])
            print(f"Inserted match {match_id} with code {normalize_code(code)}")
            return match_id

    def find_waiting_match(self, code: str) -> Optional[MatchRecord]:
        with self.read_connection() as (conn, cursor):
            cursor.execute(f"""
                SELECT {_COLUMNS}
                FROM games
                WHERE code = %s AND status = %s
                ORDER BY created_at DESC
                LIMIT 1
            """, (normalize_code(code), WAITING))
            row = cursor.fetchone()
            return MatchRecord.from_row(row) if row else None

    def update_match(self, match_id: str, fields: Dict[str, Any]) -> None:
        """
        Update columns of a match.

        Column names are checked against a fixed whitelist before being
        interpolated into the statement; values always go through parameters.

        Raises:
            ValueError: If fields contains an unknown column
        """
        cleaned = validate_update_fields(fields)
        columns = [name for name in UPDATABLE_FIELDS if name in cleaned]
        assignments = ", ".join(f"{name} = %s" for name in columns)
        values = [cleaned[name] for name in columns] + [match_id]

        with self.connection() as (conn, cursor):
            cursor.execute(
                f"UPDATE games SET {assignments} WHERE id = %s",
                tuple(values),
            )
            print(f"Updated match {match_id}: {cleaned}")
