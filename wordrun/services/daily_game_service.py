"""
Daily Game Service

Every player gets the same word on a given (UTC) day and may play it
once. The puzzle of a day is created on first access, drawn
deterministically from the word pool so that every server process picks
the same word.
"""

import logging
import random
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from bson.objectid import ObjectId

from ..config.game_settings import DAILY_ATTEMPT_SCORES, DAILY_MAX_ATTEMPTS
from ..models.game import GuessEvaluation
from ..models.puzzle import Puzzle, PuzzleStatus, UserPuzzle
from ..models.run import GuessRecord, utc_now
from ..models.user import User
from .errors import ConflictError, InvalidInputError, NotFoundError, StateCorruptionError
from .guess_evaluator import evaluate_guess, pattern_to_letters
from .run_engine import normalize_guess

logger = logging.getLogger(__name__)

MAX_HISTORY_PAGE_SIZE = 50


def score_for_attempt(attempt_number: int) -> int:
    """Points for solving on ``attempt_number``: 10, 8, 6, 4, 3, 2, then 0."""
    if 1 <= attempt_number <= len(DAILY_ATTEMPT_SCORES):
        return DAILY_ATTEMPT_SCORES[attempt_number - 1]
    return 0


@dataclass
class DailyResult:
    puzzle: Puzzle
    entry: Optional[UserPuzzle] = None
    guess: Optional[GuessRecord] = None
    evaluation: Optional[GuessEvaluation] = None
    user: Optional[User] = None

    @property
    def status(self) -> PuzzleStatus:
        return self.entry.status if self.entry else PuzzleStatus.IN_PROGRESS

    def to_dict(self) -> dict:
        entry = self.entry
        attempts_used = entry.attempts_used if entry else 0
        data = {
            "puzzle": self.puzzle.to_public_dict(),
            "status": self.status.value,
            "attempts_used": attempts_used,
            "remaining_attempts": max(0, self.puzzle.max_attempts - attempts_used),
            "finished_at": entry.finished_at.isoformat() if entry and entry.finished_at else None,
            "score_awarded": entry.score if entry else 0,
            "guesses": [
                {
                    **guess.to_public_dict(),
                    "letters": [letter.to_dict() for letter in pattern_to_letters(guess.guess_word, guess.pattern)],
                }
                for guess in (entry.guesses if entry else [])
            ],
        }
        if self.status.is_finished:
            data["puzzle_word"] = self.puzzle.puzzle_word
        if self.guess is not None:
            data["attempt_number"] = self.guess.attempt_number
        if self.evaluation is not None:
            data["evaluation"] = self.evaluation.to_dict()
        if self.user is not None:
            data["user"] = self.user.to_public_dict()
        return data


class DailyGameService:

    def __init__(self, puzzle_store, user_puzzle_store, users_service, dictionary, word_pool,
                 locks, max_attempts: int = DAILY_MAX_ATTEMPTS,
                 today: Optional[Callable[[], date]] = None):
        self.puzzle_store = puzzle_store
        self.user_puzzle_store = user_puzzle_store
        self.users_service = users_service
        self.dictionary = dictionary
        self.word_pool = word_pool
        self.locks = locks
        self.max_attempts = max_attempts
        self.today = today or (lambda: utc_now().date())

    def lock_key(self, user_id: str, day: str) -> str:
        return f"daily:{user_id}:{day}"

    def resolve_date(self, target_date: Optional[str] = None) -> str:
        """
        ISO day of the requested puzzle, today when omitted.

        Raises:
            InvalidInputError: Not a ``YYYY-MM-DD`` date
            NotFoundError: A day that has not come yet
        """
        today = self.today()
        if target_date is None or target_date == "":
            return today.isoformat()
        if not isinstance(target_date, str):
            raise InvalidInputError("Date must use the YYYY-MM-DD format")
        try:
            day = date.fromisoformat(target_date.strip())
        except ValueError:
            raise InvalidInputError("Date must use the YYYY-MM-DD format") from None
        if day > today:
            raise NotFoundError("Daily puzzle not found for date")
        return day.isoformat()

    def get_puzzle(self, target_date: Optional[str] = None) -> Puzzle:
        day = self.resolve_date(target_date)
        puzzle = self.puzzle_store.find_by_date(day)
        if puzzle is None:
            puzzle = self._create_puzzle(day)
        return puzzle

    def _create_puzzle(self, day: str) -> Puzzle:
        words = self.word_pool.get_all_words()
        if not words:
            raise StateCorruptionError("No words available for the daily puzzle")

        puzzle = Puzzle(
            puzzle_id=str(ObjectId()),
            date=day,
            puzzle_word=random.Random(day).choice(words),
            max_attempts=self.max_attempts,
        )
        try:
            self.puzzle_store.insert(puzzle)
        except ConflictError:
            # Created by a concurrent request
            return self.puzzle_store.find_by_date(day)
        logger.info(f"Daily puzzle {puzzle.daily_id} created")
        return puzzle

    def get_daily_status(self, user_id: str, target_date: Optional[str] = None) -> DailyResult:
        puzzle = self.get_puzzle(target_date)
        return DailyResult(puzzle=puzzle, entry=self.user_puzzle_store.find_for_user(user_id, puzzle.date))

    def submit_daily_guess(self, user_id: str, guess_word, target_date: Optional[str] = None) -> DailyResult:
        """
        Play one attempt on the daily puzzle.

        A win scores by attempt number; a win or the last failed attempt
        finishes the puzzle and is added to the player's daily totals.

        Raises:
            InvalidInputError: Malformed or unknown guess, bad date
            NotFoundError: Future date
            ConflictError: Puzzle already won or lost
        """
        puzzle = self.get_puzzle(target_date)
        normalized = normalize_guess(guess_word, len(puzzle.puzzle_word))
        if not self.dictionary.is_allowed(normalized):
            raise InvalidInputError("Guess word is not allowed")

        with self.locks.hold(self.lock_key(user_id, puzzle.date)):
            entry = self._get_or_start(user_id, puzzle)
            if entry.status.is_finished:
                raise ConflictError(f"Daily puzzle already {entry.status.value}")
            if entry.attempts_used >= entry.max_attempts:
                raise ConflictError("Maximum attempts reached")

            evaluation = evaluate_guess(normalized, entry.puzzle_word)
            entry.attempts_used += 1
            guess = GuessRecord(
                attempt_number=entry.attempts_used,
                guess_word=normalized,
                pattern=evaluation.pattern,
            )
            entry.guesses.append(guess)

            if evaluation.is_correct:
                entry.status = PuzzleStatus.WON
                entry.score = score_for_attempt(entry.attempts_used)
            elif entry.attempts_used >= entry.max_attempts:
                entry.status = PuzzleStatus.LOST
            if entry.status.is_finished:
                entry.finished_at = utc_now()

            self.user_puzzle_store.save(entry)

            user = None
            if entry.status.is_finished:
                user = self.users_service.record_daily_result(user_id, entry.score)
                logger.info(
                    f"User {user_id} {entry.status.value} daily puzzle {puzzle.daily_id} "
                    f"in {entry.attempts_used} attempts ({entry.score} points)"
                )
            return DailyResult(puzzle=puzzle, entry=entry, guess=guess, evaluation=evaluation, user=user)

    def _get_or_start(self, user_id: str, puzzle: Puzzle) -> UserPuzzle:
        entry = self.user_puzzle_store.find_for_user(user_id, puzzle.date)
        if entry is not None:
            return entry

        entry = UserPuzzle(
            user_puzzle_id=str(ObjectId()),
            user_id=user_id,
            puzzle_id=puzzle.puzzle_id,
            puzzle_word=puzzle.puzzle_word,
            date=puzzle.date,
            max_attempts=puzzle.max_attempts,
        )
        try:
            self.user_puzzle_store.insert(entry)
        except ConflictError:
            return self.user_puzzle_store.find_for_user(user_id, puzzle.date)
        return entry

    def paginate_history(self, user_id: str, page: int = 1, page_size: int = 10) -> dict:
        """The player's daily plays, newest day first."""
        page = max(1, page)
        page_size = min(max(page_size, 1), MAX_HISTORY_PAGE_SIZE)
        items, total_items = self.user_puzzle_store.list_for_user(user_id, (page - 1) * page_size, page_size)
        return {
            "page": page,
            "page_size": page_size,
            "total_items": total_items,
            "total_pages": -(-total_items // page_size),
            "items": [item.to_history_item() for item in items],
        }
