"""
Room Notification Events

One frozen dataclass per notification kind. Consumers dispatch on the
class (or on ``kind``) instead of probing optional fields.
"""

from dataclasses import asdict, dataclass
from typing import Any, ClassVar, Dict, Optional, Union


@dataclass(frozen=True)
class PlayerJoined:
    kind: ClassVar[str] = "room:player-joined"
    user_id: str
    username: str

    def to_payload(self) -> Dict[str, Any]:
        return {"player": {"user_id": self.user_id, "username": self.username}}


@dataclass(frozen=True)
class GameStarted:
    kind: ClassVar[str] = "room:game-started"
    run_id: str
    max_attempts: int
    word_length: int
    current_turn_player_id: str

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class GuessMade:
    kind: ClassVar[str] = "room:guess-made"
    player_id: str
    player_name: str
    guess_word: str
    pattern: str
    attempt_number: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "guess": {"guess_word": self.guess_word, "pattern": self.pattern},
            "attempt_number": self.attempt_number,
        }


@dataclass(frozen=True)
class TurnChanged:
    kind: ClassVar[str] = "room:turn-changed"
    current_turn_player_id: str
    current_turn_player_name: str

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class WordCompleted:
    kind: ClassVar[str] = "room:word-completed"
    word: str
    current_score: int
    next_word_length: Optional[int]

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class GameOver:
    kind: ClassVar[str] = "room:game-over"
    final_score: int
    words_completed: int
    reason: str  # "failed", "abandoned" or "completed"
    last_word: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PlayerLeft:
    kind: ClassVar[str] = "room:player-left"
    player_id: str
    player_name: str
    remaining_players: int

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PlayerAbandoned:
    kind: ClassVar[str] = "room:player-abandoned"
    player_id: str
    player_name: str

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RematchRequested:
    kind: ClassVar[str] = "room:rematch-request"
    requester_id: str
    requester_name: str

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RematchResponded:
    kind: ClassVar[str] = "room:rematch-response"
    responder_id: str
    responder_name: str
    accepted: bool
    new_room_id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


RoomEvent = Union[
    PlayerJoined, GameStarted, GuessMade, TurnChanged, WordCompleted,
    GameOver, PlayerLeft, PlayerAbandoned, RematchRequested, RematchResponded,
]
