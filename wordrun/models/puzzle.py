"""
Daily Puzzle Data Models

One ``Puzzle`` per calendar day, shared by every player, and one
``UserPuzzle`` per player and day holding that player's attempts.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .run import GuessRecord, utc_now


class PuzzleStatus(Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"

    @property
    def is_finished(self) -> bool:
        return self is not PuzzleStatus.IN_PROGRESS


@dataclass
class Puzzle:
    puzzle_id: str
    date: str
    puzzle_word: str
    max_attempts: int
    created_at: datetime = field(default_factory=utc_now)
    version: int = 0

    @property
    def daily_id(self) -> str:
        """Compact day identifier, ``2026-10-19`` -> ``20261019``."""
        return self.date.replace("-", "")

    def to_document(self) -> Dict[str, Any]:
        return {
            "_id": self.puzzle_id,
            "date": self.date,
            "puzzle_word": self.puzzle_word,
            "max_attempts": self.max_attempts,
            "created_at": self.created_at,
            "version": self.version,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Puzzle":
        return cls(
            puzzle_id=doc["_id"],
            date=doc["date"],
            puzzle_word=doc["puzzle_word"],
            max_attempts=doc["max_attempts"],
            created_at=doc.get("created_at") or utc_now(),
            version=doc.get("version", 0),
        )

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "id": self.puzzle_id,
            "date": self.date,
            "daily_id": self.daily_id,
            "max_attempts": self.max_attempts,
            "word_length": len(self.puzzle_word),
        }


@dataclass
class UserPuzzle:
    """A player's play of one daily puzzle."""
    user_puzzle_id: str
    user_id: str
    puzzle_id: str
    puzzle_word: str
    date: str
    max_attempts: int
    status: PuzzleStatus = PuzzleStatus.IN_PROGRESS
    attempts_used: int = 0
    score: int = 0
    guesses: List[GuessRecord] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    finished_at: Optional[datetime] = None
    version: int = 0

    @property
    def remaining_attempts(self) -> int:
        return max(0, self.max_attempts - self.attempts_used)

    def to_document(self) -> Dict[str, Any]:
        return {
            "_id": self.user_puzzle_id,
            "user_id": self.user_id,
            "puzzle_id": self.puzzle_id,
            "puzzle_word": self.puzzle_word,
            "date": self.date,
            "max_attempts": self.max_attempts,
            "status": self.status.value,
            "attempts_used": self.attempts_used,
            "score": self.score,
            "guesses": [g.to_document() for g in self.guesses],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "finished_at": self.finished_at,
            "version": self.version,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "UserPuzzle":
        return cls(
            user_puzzle_id=doc["_id"],
            user_id=doc["user_id"],
            puzzle_id=doc["puzzle_id"],
            puzzle_word=doc["puzzle_word"],
            date=doc["date"],
            max_attempts=doc["max_attempts"],
            status=PuzzleStatus(doc["status"]),
            attempts_used=doc.get("attempts_used", 0),
            score=doc.get("score", 0),
            guesses=[GuessRecord.from_document(g) for g in doc.get("guesses", [])],
            created_at=doc.get("created_at") or utc_now(),
            updated_at=doc.get("updated_at") or utc_now(),
            finished_at=doc.get("finished_at"),
            version=doc.get("version", 0),
        )

    def to_history_item(self) -> Dict[str, Any]:
        """History view; the word is only shown once the puzzle is over."""
        return {
            "user_puzzle_id": self.user_puzzle_id,
            "puzzle_id": self.puzzle_id,
            "puzzle_word": self.puzzle_word if self.status.is_finished else None,
            "date": self.date,
            "status": self.status.value,
            "attempts_used": self.attempts_used,
            "max_attempts": self.max_attempts,
            "score": self.score,
            "guesses": [g.to_public_dict() for g in self.guesses],
            "created_at": self.created_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }
