"""
Game Data Models

Contains the letter evaluation structures shared by every game mode.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class LetterState(Enum):
    """Evaluation state of a single guessed letter."""
    CORRECT = "correct"
    PRESENT = "present"
    ABSENT = "absent"


# Compact pattern encoding, one digit per letter
PATTERN_DIGITS = {
    LetterState.CORRECT: "2",
    LetterState.PRESENT: "1",
    LetterState.ABSENT: "0",
}

DIGIT_STATES = {digit: state for state, digit in PATTERN_DIGITS.items()}


@dataclass(frozen=True)
class LetterEvaluation:
    letter: str
    state: LetterState

    def to_dict(self) -> dict:
        return {"letter": self.letter, "state": self.state.value}


@dataclass(frozen=True)
class GuessEvaluation:
    """Result of scoring a guess against a target word."""
    letters: List[LetterEvaluation] = field(default_factory=list)
    pattern: str = ""
    is_correct: bool = False

    def to_dict(self) -> dict:
        return {
            "letters": [letter.to_dict() for letter in self.letters],
            "pattern": self.pattern,
            "is_correct": self.is_correct,
        }
