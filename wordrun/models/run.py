"""
Run Data Models

A run is one continuous sequence of word-guessing rounds, either for a
single player or for the two players of a cooperative room. The records
here are plain dataclasses; the storage layer converts them to and from
documents with ``to_document``/``from_document``.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RunStatus(Enum):
    ACTIVE = "active"
    FAILED = "failed"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        return self is not RunStatus.ACTIVE


class WordResult(Enum):
    WON = "won"
    LOST = "lost"


@dataclass(frozen=True)
class GuessRecord:
    """One attempt against the current target word. Never mutated."""
    attempt_number: int
    guess_word: str
    pattern: str
    player_id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)

    def to_document(self) -> Dict[str, Any]:
        doc = {
            "attempt_number": self.attempt_number,
            "guess_word": self.guess_word,
            "pattern": self.pattern,
            "created_at": self.created_at,
        }
        if self.player_id is not None:
            doc["player_id"] = self.player_id
        return doc

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "GuessRecord":
        return cls(
            attempt_number=doc["attempt_number"],
            guess_word=doc["guess_word"],
            pattern=doc["pattern"],
            player_id=doc.get("player_id"),
            created_at=doc.get("created_at") or utc_now(),
        )

    def to_public_dict(self) -> Dict[str, Any]:
        data = self.to_document()
        data["created_at"] = self.created_at.isoformat()
        return data


@dataclass(frozen=True)
class HistoryEntry:
    """A concluded word of a run, appended exactly once."""
    order: int
    word: str
    result: WordResult
    attempts_used: int
    guesses: List[GuessRecord] = field(default_factory=list)
    finished_at: datetime = field(default_factory=utc_now)

    def to_document(self) -> Dict[str, Any]:
        return {
            "order": self.order,
            "word": self.word,
            "result": self.result.value,
            "attempts_used": self.attempts_used,
            "guesses": [guess.to_document() for guess in self.guesses],
            "finished_at": self.finished_at,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "HistoryEntry":
        return cls(
            order=doc["order"],
            word=doc["word"],
            result=WordResult(doc["result"]),
            attempts_used=doc["attempts_used"],
            guesses=[GuessRecord.from_document(g) for g in doc.get("guesses", [])],
            finished_at=doc.get("finished_at") or utc_now(),
        )

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "order": self.order,
            "word": self.word,
            "result": self.result.value,
            "attempts_used": self.attempts_used,
            "guesses": [guess.to_public_dict() for guess in self.guesses],
            "finished_at": self.finished_at.isoformat(),
        }


@dataclass
class RunState:
    """Persistent state of a solo or cooperative infinite run."""
    run_id: str
    user_id: str
    max_attempts: int
    status: RunStatus = RunStatus.ACTIVE
    current_score: int = 0
    attempts_used: int = 0
    target_word: Optional[str] = None
    used_words: List[str] = field(default_factory=list)
    current_guesses: List[GuessRecord] = field(default_factory=list)
    history: List[HistoryEntry] = field(default_factory=list)
    # Cooperative runs only
    room_id: Optional[str] = None
    is_multiplayer: bool = False
    current_turn_player_id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    # Optimistic concurrency token, bumped by the store on every save
    version: int = 0

    @property
    def is_active(self) -> bool:
        return self.status is RunStatus.ACTIVE

    @property
    def words_completed(self) -> int:
        return sum(1 for entry in self.history if entry.result is WordResult.WON)

    def has_guessed(self, guess_word: str) -> bool:
        return any(g.guess_word == guess_word for g in self.current_guesses)

    def mark_used(self, word: str) -> None:
        if word not in self.used_words:
            self.used_words.append(word)

    def conclude_word(self, result: WordResult) -> HistoryEntry:
        """Move the current word and its guesses into the history log."""
        entry = HistoryEntry(
            order=len(self.history) + 1,
            word=self.target_word,
            result=result,
            attempts_used=self.attempts_used,
            guesses=list(self.current_guesses),
        )
        self.history.append(entry)
        self.mark_used(self.target_word)
        self.current_guesses = []
        self.attempts_used = 0
        return entry

    def to_document(self) -> Dict[str, Any]:
        return {
            "_id": self.run_id,
            "user_id": self.user_id,
            "status": self.status.value,
            "current_score": self.current_score,
            "max_attempts": self.max_attempts,
            "attempts_used": self.attempts_used,
            "target_word": self.target_word,
            "used_words": list(self.used_words),
            "current_guesses": [g.to_document() for g in self.current_guesses],
            "history": [h.to_document() for h in self.history],
            "room_id": self.room_id,
            "is_multiplayer": self.is_multiplayer,
            "current_turn_player_id": self.current_turn_player_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "version": self.version,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "RunState":
        return cls(
            run_id=doc["_id"],
            user_id=doc["user_id"],
            status=RunStatus(doc["status"]),
            current_score=doc.get("current_score", 0),
            max_attempts=doc["max_attempts"],
            attempts_used=doc.get("attempts_used", 0),
            target_word=doc.get("target_word"),
            used_words=list(doc.get("used_words", [])),
            current_guesses=[GuessRecord.from_document(g) for g in doc.get("current_guesses", [])],
            history=[HistoryEntry.from_document(h) for h in doc.get("history", [])],
            room_id=doc.get("room_id"),
            is_multiplayer=doc.get("is_multiplayer", False),
            current_turn_player_id=doc.get("current_turn_player_id"),
            created_at=doc.get("created_at") or utc_now(),
            updated_at=doc.get("updated_at") or utc_now(),
            version=doc.get("version", 0),
        )

    def to_public_dict(self) -> Dict[str, Any]:
        """Client view of the run. The target word stays hidden while it is being guessed."""
        return {
            "id": self.run_id,
            "status": self.status.value,
            "current_score": self.current_score,
            "max_attempts": self.max_attempts,
            "attempts_used": self.attempts_used,
            "word_length": len(self.target_word) if self.target_word else None,
            "current_guesses": [g.to_public_dict() for g in self.current_guesses],
            "history": [h.to_public_dict() for h in self.history],
            "words_completed": self.words_completed,
            "room_id": self.room_id,
            "is_multiplayer": self.is_multiplayer,
            "current_turn_player_id": self.current_turn_player_id,
        }
