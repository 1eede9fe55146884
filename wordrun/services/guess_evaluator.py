"""
Guess Evaluator

Scores a guess against a target word with the two-pass Wordle rule.
"""

from typing import List, Optional

from ..models.game import DIGIT_STATES, PATTERN_DIGITS, GuessEvaluation, LetterEvaluation, LetterState
from .errors import LengthMismatchError


def evaluate_guess(guess: str, target: str) -> GuessEvaluation:
    """
    Implements the authentic Wordle letter evaluation algorithm.

    Exact matches are resolved first and consume their target position.
    Every remaining guess letter then consumes the leftmost unconsumed
    target position holding the same letter, so a single target letter is
    never reported twice.

    Raises:
        LengthMismatchError: If guess and target lengths differ
    """
    if len(guess) != len(target):
        raise LengthMismatchError(
            f"Guess has {len(guess)} letters but target has {len(target)}"
        )

    target_chars: List[Optional[str]] = list(target)
    states: List[Optional[LetterState]] = [None] * len(guess)

    # First pass: exact position matches
    for i, letter in enumerate(guess):
        if letter == target_chars[i]:
            states[i] = LetterState.CORRECT
            target_chars[i] = None

    # Second pass: misplaced letters, consuming target positions left to right
    for i, letter in enumerate(guess):
        if states[i] is not None:
            continue
        if letter in target_chars:
            states[i] = LetterState.PRESENT
            target_chars[target_chars.index(letter)] = None
        else:
            states[i] = LetterState.ABSENT

    letters = [LetterEvaluation(letter, state) for letter, state in zip(guess, states)]
    return GuessEvaluation(
        letters=letters,
        pattern=build_pattern(letters),
        is_correct=all(entry.state is LetterState.CORRECT for entry in letters),
    )


def build_pattern(letters: List[LetterEvaluation]) -> str:
    return "".join(PATTERN_DIGITS[entry.state] for entry in letters)


def pattern_to_letters(guess_word: str, pattern: str) -> List[LetterEvaluation]:
    """Rebuild per-letter states from a stored pattern string."""
    return [
        LetterEvaluation(letter, DIGIT_STATES.get(digit, LetterState.ABSENT))
        for letter, digit in zip(guess_word, pattern)
    ]
