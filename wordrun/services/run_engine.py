"""
Run Engine

State transitions shared by the solo and cooperative infinite runs:
guess validation, scoring, word victory, failure and word selection.
Subclasses own persistence order, locking and progress updates.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Set

from ..models.game import GuessEvaluation
from ..models.room import Room
from ..models.run import GuessRecord, HistoryEntry, RunState, RunStatus, WordResult
from ..models.user import User
from ..utils.helpers import normalize_word
from .errors import ConflictError, InvalidInputError, StateCorruptionError
from .guess_evaluator import evaluate_guess

logger = logging.getLogger(__name__)


# Outcomes reported by run operations
OUTCOME_STARTED = "started"
OUTCOME_CONTINUE = "continue"
OUTCOME_WORD_WON = "word_won"
OUTCOME_FAILED = "failed"
OUTCOME_COMPLETED = "completed"
OUTCOME_ABANDONED = "abandoned"
OUTCOME_UNCHANGED = "unchanged"


@dataclass
class RunResult:
    run: RunState
    outcome: str
    total_words: int = 0
    user: Optional[User] = None
    room: Optional[Room] = None
    guess: Optional[GuessRecord] = None
    evaluation: Optional[GuessEvaluation] = None
    finished_word: Optional[HistoryEntry] = None
    final_score: Optional[int] = None
    next_turn_player_id: Optional[str] = None
    users: List[User] = field(default_factory=list)

    @property
    def is_game_over(self) -> bool:
        return self.run.status.is_terminal

    def to_dict(self) -> dict:
        data = {
            "run": self.run.to_public_dict(),
            "outcome": self.outcome,
            "is_game_over": self.is_game_over,
            "total_words": self.total_words,
        }
        if self.user is not None:
            data["user"] = self.user.to_public_dict()
        if self.room is not None:
            data["room"] = self.room.to_public_dict()
        if self.guess is not None:
            data["guess"] = self.guess.to_public_dict()
        if self.evaluation is not None:
            data["evaluation"] = self.evaluation.to_dict()
        if self.finished_word is not None:
            data["finished_word"] = self.finished_word.to_public_dict()
        if self.final_score is not None:
            data["final_score"] = self.final_score
        if self.next_turn_player_id is not None:
            data["next_turn_player_id"] = self.next_turn_player_id
        return data


def normalize_guess(guess_word, word_length: int) -> str:
    """
    Accent-strip, trim and uppercase a submitted guess, rejecting anything
    that cannot be a word of ``word_length`` letters.

    Raises:
        InvalidInputError: Not text, empty, wrong length or non-alphabetic
    """
    if guess_word is not None and not isinstance(guess_word, str):
        raise InvalidInputError("Guess word must be text")

    normalized = normalize_word(guess_word)
    if not normalized:
        raise InvalidInputError("Guess word is required")
    if len(normalized) != word_length:
        raise InvalidInputError(f"Guess must contain {word_length} letters")
    if not normalized.isalpha():
        raise InvalidInputError("Guess must contain only letters")
    return normalized


class RunEngine:
    """Base class holding the word sources and the pure run transitions."""

    def __init__(self, run_store, users_service, dictionary, word_pool, max_attempts: int,
                 locks, rng: Optional[random.Random] = None):
        self.run_store = run_store
        self.users_service = users_service
        self.dictionary = dictionary
        self.word_pool = word_pool
        self.max_attempts = max_attempts
        self.locks = locks
        self.rng = rng or random.Random()
        self._pool_cache: Optional[List[str]] = None

    # Word selection

    def ensure_word_pool(self) -> List[str]:
        if self._pool_cache is None:
            words = self.word_pool.get_all_words()
            if not words:
                raise StateCorruptionError("Dictionary for infinite mode is empty")
            self._pool_cache = words
        return self._pool_cache

    def total_words(self) -> int:
        return len(self.ensure_word_pool())

    def pick_next_word(self, excluded: Set[str]) -> Optional[str]:
        """Uniform choice among pool words not yet used; None once the pool is exhausted."""
        available = [word for word in self.ensure_word_pool() if word not in excluded]
        if not available:
            return None
        return self.rng.choice(available)

    # Guess handling

    def validate_guess(self, run: RunState, guess_word: str) -> str:
        """
        Normalize a guess and check it against the run, without touching it.

        Raises:
            StateCorruptionError: Active run without a target word
            InvalidInputError: Empty, wrong length, non-alphabetic or unknown word
            ConflictError: Word already guessed for the current target
        """
        if not run.target_word:
            raise StateCorruptionError("Run is active but has no target word")

        normalized = normalize_guess(guess_word, len(run.target_word))

        if run.has_guessed(normalized):
            raise ConflictError("You already tried this word")

        if not self.dictionary.is_allowed(normalized):
            raise InvalidInputError("Guess word is not allowed")

        return normalized

    def apply_guess(self, run: RunState, normalized_guess: str, player_id: Optional[str] = None):
        evaluation = evaluate_guess(normalized_guess, run.target_word)
        run.attempts_used += 1
        record = GuessRecord(
            attempt_number=run.attempts_used,
            guess_word=normalized_guess,
            pattern=evaluation.pattern,
            player_id=player_id,
        )
        run.current_guesses.append(record)
        return record, evaluation

    def is_out_of_attempts(self, run: RunState) -> bool:
        return run.attempts_used >= run.max_attempts

    # Transitions

    def win_word(self, run: RunState) -> HistoryEntry:
        """
        Log the current word as won, bump the score and draw the next word.

        The run becomes ``completed`` with no target when the pool is
        exhausted; the score attained is returned through the history.
        """
        entry = run.conclude_word(WordResult.WON)
        run.current_score += 1

        next_word = self.pick_next_word(set(run.used_words))
        if next_word:
            run.target_word = next_word
            run.mark_used(next_word)
            run.status = RunStatus.ACTIVE
        else:
            run.target_word = None
            run.status = RunStatus.COMPLETED
            run.current_score = 0
        return entry

    def fail_run(self, run: RunState) -> Optional[HistoryEntry]:
        """Log the in-progress word as lost (if any) and move the run to ``failed``."""
        entry = None
        if run.target_word:
            entry = run.conclude_word(WordResult.LOST)
        run.status = RunStatus.FAILED
        run.target_word = None
        run.current_guesses = []
        run.attempts_used = 0
        run.current_score = 0
        run.current_turn_player_id = None
        return entry
