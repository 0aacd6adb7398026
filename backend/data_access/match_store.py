"""
MatchStore: the persistent record of a match.

The game core writes to it exactly once per match, when the host reaches
ENDED. Lobby code uses ``create_match``/``find_waiting_match`` to pair
players up before the core ever runs.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

# Match status values (games.status)
WAITING = "waiting"
PLAYING = "playing"
FINISHED = "finished"
STATUSES = {WAITING, PLAYING, FINISHED}

UPDATABLE_FIELDS = ("code", "status", "player1_id", "player2_id", "winner_id")


@dataclass(frozen=True)
class MatchRecord:
    """
    One row of the games table.

    Attributes:
        id: match identifier
        code: 6 character room code, upper case
        status: waiting, playing or finished
        player1_id: host player id
        player2_id: guest player id, once someone joined
        winner_id: winning player id, None while unfinished or on a draw
    """

    id: str
    code: str
    status: str
    player1_id: str
    player2_id: Optional[str] = None
    winner_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "MatchRecord":
        return cls(
            id=str(row["id"]),
            code=row["code"],
            status=row["status"],
            player1_id=row["player1_id"],
            player2_id=row.get("player2_id"),
            winner_id=row.get("winner_id"),
        )


def normalize_code(code: str) -> str:
    return code.strip().upper()


def validate_update_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check an update dict before it reaches the database.

    Raises:
        ValueError: on unknown columns, a bad status, or an empty update
    """
    if not fields:
        raise ValueError("No fields to update")
    unknown = set(fields) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown match fields: {sorted(unknown)}")
    if "status" in fields and fields["status"] not in STATUSES:
        raise ValueError(f"Invalid match status: {fields['status']!r}")
    cleaned = dict(fields)
    if "code" in cleaned:
        cleaned["code"] = normalize_code(cleaned["code"])
    return cleaned


class MatchStore(ABC):
    """Interface every match persistence backend implements."""

    @abstractmethod
    def create_match(self, code: str, host_id: str) -> str:
        """Insert a waiting match hosted by ``host_id``; returns the match id."""

    @abstractmethod
    def find_waiting_match(self, code: str) -> Optional[MatchRecord]:
        """Return the waiting match with ``code``, or None."""

    @abstractmethod
    def update_match(self, match_id: str, fields: Dict[str, Any]) -> None:
        """Apply ``fields`` (column -> value) to the match."""


class InMemoryMatchStore(MatchStore):
    """
    Dictionary-backed store for local play and tests.

    Attributes:
        records: match id -> MatchRecord
        updates: every (match_id, fields) passed to update_match, in order
    """

    def __init__(self):
        self.records: Dict[str, MatchRecord] = {}
        self.updates: List[Tuple[str, Dict[str, Any]]] = []

    def create_match(self, code: str, host_id: str) -> str:
        match_id = str(uuid.uuid4())
        self.records[match_id] = MatchRecord(
            id=match_id,
            code=normalize_code(code),
            status=WAITING,
            player1_id=host_id,
        )
        return match_id

    def find_waiting_match(self, code: str) -> Optional[MatchRecord]:
        code = normalize_code(code)
        for record in self.records.values():
            if record.code == code and record.status == WAITING:
                return record
        return None

    def update_match(self, match_id: str, fields: Dict[str, Any]) -> None:
        cleaned = validate_update_fields(fields)
        if match_id not in self.records:
            raise KeyError(f"Match {match_id} not found")
        self.updates.append((match_id, cleaned))
        self.records[match_id] = replace(self.records[match_id], **cleaned)

    def get(self, match_id: str) -> Optional[MatchRecord]:
        return self.records.get(match_id)
