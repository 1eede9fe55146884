"""
Room Data Models

A room pairs two players for cooperative play. Player order matters:
index 0 and 1 drive the turn derivation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .run import utc_now


class RoomStatus(Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


@dataclass
class RoomPlayer:
    user_id: str
    username: str
    joined_at: datetime = field(default_factory=utc_now)
    wants_rematch: bool = False

    def to_document(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "joined_at": self.joined_at,
            "wants_rematch": self.wants_rematch,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "RoomPlayer":
        return cls(
            user_id=doc["user_id"],
            username=doc["username"],
            joined_at=doc.get("joined_at") or utc_now(),
            wants_rematch=doc.get("wants_rematch", False),
        )


@dataclass
class Room:
    room_id: str
    created_by: str
    players: List[RoomPlayer] = field(default_factory=list)
    max_players: int = 2
    status: RoomStatus = RoomStatus.WAITING
    games_played: int = 0
    current_run_id: Optional[str] = None
    mode: str = "coop"
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    version: int = 0

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.max_players

    def has_player(self, user_id: str) -> bool:
        return any(p.user_id == user_id for p in self.players)

    def get_player(self, user_id: str) -> Optional[RoomPlayer]:
        for player in self.players:
            if player.user_id == user_id:
                return player
        return None

    def username_of(self, user_id: str) -> Optional[str]:
        player = self.get_player(user_id)
        return player.username if player else None

    def to_document(self) -> Dict[str, Any]:
        return {
            "_id": self.room_id,
            "created_by": self.created_by,
            "players": [p.to_document() for p in self.players],
            "max_players": self.max_players,
            "status": self.status.value,
            "games_played": self.games_played,
            "current_run_id": self.current_run_id,
            "mode": self.mode,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "version": self.version,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Room":
        return cls(
            room_id=doc["_id"],
            created_by=doc["created_by"],
            players=[RoomPlayer.from_document(p) for p in doc.get("players", [])],
            max_players=doc.get("max_players", 2),
            status=RoomStatus(doc["status"]),
            games_played=doc.get("games_played", 0),
            current_run_id=doc.get("current_run_id"),
            mode=doc.get("mode", "coop"),
            created_at=doc.get("created_at") or utc_now(),
            updated_at=doc.get("updated_at") or utc_now(),
            version=doc.get("version", 0),
        )

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "room_id": self.room_id,
            "status": self.status.value,
            "players": [
                {
                    "user_id": p.user_id,
                    "username": p.username,
                    "joined_at": p.joined_at.isoformat(),
                    "wants_rematch": p.wants_rematch,
                }
                for p in self.players
            ],
            "created_by": self.created_by,
            "max_players": self.max_players,
            "games_played": self.games_played,
            "players_count": len(self.players),
            "needs_players": self.max_players - len(self.players),
            "is_waiting": self.status is RoomStatus.WAITING,
            "is_playing": self.status is RoomStatus.PLAYING,
            "is_finished": self.status is RoomStatus.FINISHED,
        }
