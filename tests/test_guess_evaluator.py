import pytest

from wordrun.models.game import LetterState
from wordrun.services.errors import LengthMismatchError
from wordrun.services.guess_evaluator import evaluate_guess, pattern_to_letters


def states(evaluation):
    return [entry.state for entry in evaluation.letters]


def test_exact_guess_is_all_correct():
    evaluation = evaluate_guess("ZEBRA", "ZEBRA")
    assert evaluation.pattern == "22222"
    assert evaluation.is_correct


def test_evaluation_is_deterministic():
    first = evaluate_guess("CRANE", "SLATE")
    second = evaluate_guess("CRANE", "SLATE")
    assert first == second
    assert first.pattern == "00202"


def test_anagram_with_repeated_letters():
    # Two L's in both words: each guessed L consumes one target L
    evaluation = evaluate_guess("ALLOY", "LOYAL")
    assert evaluation.pattern == "11111"
    assert states(evaluation) == [LetterState.PRESENT] * 5
    assert not evaluation.is_correct


def test_repeated_guess_letter_only_matches_once():
    # ABIDE holds one E: the first E is present, the second absent
    evaluation = evaluate_guess("SPEED", "ABIDE")
    assert evaluation.pattern == "00101"


def test_exact_match_consumes_before_misplaced():
    # The final E is exact, the leading E takes the remaining one
    evaluation = evaluate_guess("EERIE", "THEME")
    assert evaluation.pattern == "10002"
    assert states(evaluation)[0] is LetterState.PRESENT
    assert states(evaluation)[1] is LetterState.ABSENT


def test_length_mismatch_raises():
    with pytest.raises(LengthMismatchError):
        evaluate_guess("SPEEDS", "ABIDE")


def test_to_dict_exposes_letters_and_pattern():
    data = evaluate_guess("SPEED", "SPEED").to_dict()
    assert data["pattern"] == "22222"
    assert data["is_correct"] is True
    assert data["letters"][0] == {"letter": "S", "state": "correct"}


def test_pattern_to_letters_rebuilds_states():
    letters = pattern_to_letters("EERIE", "10002")
    assert [l.letter for l in letters] == list("EERIE")
    assert [l.state for l in letters] == [
        LetterState.PRESENT, LetterState.ABSENT, LetterState.ABSENT,
        LetterState.ABSENT, LetterState.CORRECT,
    ]
