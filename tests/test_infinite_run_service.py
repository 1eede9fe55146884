import pytest

from conftest import register, wrong_words
from wordrun.models.run import RunStatus, WordResult
from wordrun.services.errors import ConflictError, InvalidInputError, NotFoundError
from wordrun.services.run_engine import (
    OUTCOME_ABANDONED, OUTCOME_COMPLETED, OUTCOME_CONTINUE, OUTCOME_FAILED,
    OUTCOME_UNCHANGED, OUTCOME_WORD_WON,
)


@pytest.fixture
def solo(services):
    return services.solo_runs


@pytest.fixture
def user_id(services):
    return register(services, "alice")


def test_start_run_is_idempotent(services, solo, user_id):
    first = solo.start_run(user_id)
    second = solo.start_run(user_id)

    assert first.run.run_id == second.run.run_id
    assert first.run.status is RunStatus.ACTIVE
    assert first.run.target_word in first.run.used_words
    assert first.total_words == 5
    assert services.users.find_by_id(user_id).infinite_status == "active"


def test_get_run_without_active_run(solo, user_id):
    with pytest.raises(NotFoundError):
        solo.get_run(user_id)
    with pytest.raises(NotFoundError):
        solo.submit_guess(user_id, "CRANE")


def test_wrong_guess_continues(solo, user_id, services):
    run = solo.start_run(user_id).run
    guess = wrong_words(services, run, 1)[0]

    result = solo.submit_guess(user_id, guess.lower())

    assert result.outcome == OUTCOME_CONTINUE
    assert result.run.attempts_used == 1
    assert result.guess.guess_word == guess
    assert result.run.target_word == run.target_word


def test_exhausting_attempts_fails_the_run(solo, user_id, services):
    run = solo.start_run(user_id).run
    target = run.target_word

    result = None
    for guess in wrong_words(services, run, 4):
        result = solo.submit_guess(user_id, guess)

    assert result.outcome == OUTCOME_FAILED
    assert result.run.status is RunStatus.FAILED
    assert result.run.current_score == 0
    assert result.run.target_word is None
    assert result.final_score == 0

    lost = result.run.history[-1]
    assert lost.word == target
    assert lost.result is WordResult.LOST
    assert lost.attempts_used == 4

    with pytest.raises(NotFoundError):
        solo.get_run(user_id)


def test_score_counts_words_won(solo, user_id, services):
    run = solo.start_run(user_id).run

    first = solo.submit_guess(user_id, run.target_word)
    second = solo.submit_guess(user_id, first.run.target_word)

    assert first.outcome == OUTCOME_WORD_WON
    assert second.outcome == OUTCOME_WORD_WON
    assert second.run.current_score == 2
    assert second.run.attempts_used == 0
    assert second.run.current_guesses == []
    assert [h.result for h in second.run.history] == [WordResult.WON, WordResult.WON]

    user = services.users.find_by_id(user_id)
    assert user.infinite_current_score == 2
    assert user.infinite_record == 2


def test_record_survives_failure(solo, user_id, services):
    run = solo.start_run(user_id).run
    run = solo.submit_guess(user_id, run.target_word).run

    result = None
    for guess in wrong_words(services, run, 4):
        result = solo.submit_guess(user_id, guess)

    assert result.final_score == 1
    user = services.users.find_by_id(user_id)
    assert user.infinite_status == "failed"
    assert user.infinite_current_score == 0
    assert user.infinite_record == 1

    # A weaker later run never lowers the record
    new_run = solo.start_run(user_id).run
    assert new_run.run_id != run.run_id
    assert new_run.current_score == 0
    assert services.users.find_by_id(user_id).infinite_record == 1


def test_words_never_repeat_within_a_run(make_services):
    services = make_services()
    user_id = register(services, "carla")
    run = services.solo_runs.start_run(user_id).run

    seen = []
    result = None
    while run.target_word:
        seen.append(run.target_word)
        result = services.solo_runs.submit_guess(user_id, run.target_word)
        run = result.run

    assert sorted(seen) == sorted(["ALLOY", "LOYAL", "SPEED", "THEME", "ZEBRA"])
    assert result.outcome == OUTCOME_COMPLETED


def test_exhausted_pool_completes_the_run(make_services):
    services = make_services(pool=["SPEED"])
    user_id = register(services, "dario")
    services.solo_runs.start_run(user_id)

    result = services.solo_runs.submit_guess(user_id, "  spéed ")

    assert result.outcome == OUTCOME_COMPLETED
    assert result.run.status is RunStatus.COMPLETED
    assert result.run.target_word is None
    assert result.final_score == 1
    user = services.users.find_by_id(user_id)
    assert user.infinite_status == "completed"
    assert user.infinite_record == 1


def test_duplicate_guess_is_rejected_without_consuming_an_attempt(solo, user_id, services):
    run = solo.start_run(user_id).run
    guess = wrong_words(services, run, 1)[0]
    solo.submit_guess(user_id, guess)

    with pytest.raises(ConflictError):
        solo.submit_guess(user_id, guess)

    assert solo.get_run(user_id).run.attempts_used == 1


@pytest.mark.parametrize("guess", ["", "ABC", "AB1DE", "QQQQQ"])
def test_invalid_guesses_are_rejected(solo, user_id, guess):
    solo.start_run(user_id)

    with pytest.raises(InvalidInputError):
        solo.submit_guess(user_id, guess)

    assert solo.get_run(user_id).run.attempts_used == 0


def test_abandon_is_idempotent(solo, user_id, services):
    run = solo.start_run(user_id).run
    run = solo.submit_guess(user_id, run.target_word).run

    abandoned = solo.abandon_run(user_id)
    again = solo.abandon_run(user_id)

    assert abandoned.outcome == OUTCOME_ABANDONED
    assert abandoned.run.status is RunStatus.FAILED
    assert abandoned.final_score == 1
    assert abandoned.run.history[-1].result is WordResult.LOST

    assert again.outcome == OUTCOME_UNCHANGED
    assert again.run.run_id == abandoned.run.run_id
    assert len(again.run.history) == len(abandoned.run.history)
    assert services.users.find_by_id(user_id).infinite_record == 1


def test_abandon_without_any_run(solo, user_id):
    with pytest.raises(NotFoundError):
        solo.abandon_run(user_id)


def test_public_view_hides_the_target(solo, user_id):
    result = solo.start_run(user_id)
    data = result.to_dict()

    assert "target_word" not in data["run"]
    assert data["run"]["word_length"] == 5
    assert result.run.target_word not in str(data)


def test_non_text_guess_is_invalid_input(services):
    user_id = register(services, "alice")
    services.solo_runs.start_run(user_id)

    with pytest.raises(InvalidInputError, match="must be text"):
        services.solo_runs.submit_guess(user_id, 12345)
    with pytest.raises(InvalidInputError, match="must be text"):
        services.solo_runs.submit_guess(user_id, ["CRANE"])

    assert services.solo_runs.get_run(user_id).run.attempts_used == 0
