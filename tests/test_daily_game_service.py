from datetime import date

import pytest

from conftest import register
from wordrun.models.puzzle import PuzzleStatus
from wordrun.services.daily_game_service import score_for_attempt
from wordrun.services.errors import ConflictError, InvalidInputError, NotFoundError

TODAY = date(2026, 10, 19)


@pytest.fixture
def daily(services):
    services.daily.today = lambda: TODAY
    return services.daily


def wrong_daily_words(services, puzzle, count):
    words = [w for w in services.dictionary.get_all_words() if w != puzzle.puzzle_word]
    assert len(words) >= count
    return words[:count]


def test_puzzle_of_a_day_is_stable_and_shared(daily, services):
    first = daily.get_puzzle()
    again = daily.get_puzzle("2026-10-19")

    assert first.date == "2026-10-19"
    assert first.daily_id == "20261019"
    assert again.puzzle_id == first.puzzle_id
    assert first.puzzle_word in services.word_pool.get_all_words()
    assert first.max_attempts == 6


def test_same_day_draws_same_word_across_servers(make_services):
    words = set()
    for seed in (1, 2):
        services = make_services(seed=seed)
        services.daily.today = lambda: TODAY
        words.add(services.daily.get_puzzle().puzzle_word)

    assert len(words) == 1


def test_status_before_playing(daily, services):
    alice = register(services, "alice")

    body = daily.get_daily_status(alice).to_dict()

    assert body["status"] == "in_progress"
    assert body["attempts_used"] == 0
    assert body["remaining_attempts"] == 6
    assert body["guesses"] == []
    assert "puzzle_word" not in body


def test_solving_scores_by_attempt(daily, services):
    alice = register(services, "alice")
    puzzle = daily.get_puzzle()
    miss = wrong_daily_words(services, puzzle, 1)[0]

    daily.submit_daily_guess(alice, miss)
    result = daily.submit_daily_guess(alice, puzzle.puzzle_word.lower())

    assert result.status is PuzzleStatus.WON
    assert result.evaluation.pattern == "22222"
    assert result.entry.score == 8
    assert result.entry.finished_at is not None
    user = services.users.find_by_id(alice)
    assert user.daily_score == 8
    assert user.daily_streak == 1

    body = result.to_dict()
    assert body["puzzle_word"] == puzzle.puzzle_word
    assert body["guesses"][0]["letters"][0]["letter"] == miss[0]


def test_running_out_of_attempts_loses(daily, services):
    alice = register(services, "alice")
    puzzle = daily.get_puzzle()

    result = None
    for word in wrong_daily_words(services, puzzle, 6):
        result = daily.submit_daily_guess(alice, word)

    assert result.status is PuzzleStatus.LOST
    assert result.entry.score == 0
    assert services.users.find_by_id(alice).daily_streak == 1


def test_finished_puzzle_cannot_be_replayed(daily, services):
    alice = register(services, "alice")
    puzzle = daily.get_puzzle()
    daily.submit_daily_guess(alice, puzzle.puzzle_word)

    with pytest.raises(ConflictError, match="Daily puzzle already won"):
        daily.submit_daily_guess(alice, puzzle.puzzle_word)

    assert daily.get_daily_status(alice).entry.attempts_used == 1
    assert services.users.find_by_id(alice).daily_score == 10


def test_players_play_independently(daily, services):
    alice = register(services, "alice")
    bruno = register(services, "bruno")
    puzzle = daily.get_puzzle()

    daily.submit_daily_guess(alice, puzzle.puzzle_word)
    result = daily.submit_daily_guess(bruno, wrong_daily_words(services, puzzle, 1)[0])

    assert result.status is PuzzleStatus.IN_PROGRESS
    assert result.entry.attempts_used == 1


def test_invalid_guesses_and_dates(daily, services):
    alice = register(services, "alice")

    with pytest.raises(InvalidInputError):
        daily.submit_daily_guess(alice, 12345)
    with pytest.raises(InvalidInputError):
        daily.submit_daily_guess(alice, "QQQQQ")
    with pytest.raises(InvalidInputError):
        daily.submit_daily_guess(alice, "ABC")
    with pytest.raises(InvalidInputError):
        daily.get_daily_status(alice, "19/10/2026")
    with pytest.raises(NotFoundError):
        daily.get_daily_status(alice, "2026-10-20")

    assert daily.get_daily_status(alice).entry is None


def test_history_is_paginated_newest_first(daily, services):
    alice = register(services, "alice")
    for day in ("2026-10-17", "2026-10-18", "2026-10-19"):
        puzzle = daily.get_puzzle(day)
        daily.submit_daily_guess(alice, puzzle.puzzle_word, day)

    first_page = daily.paginate_history(alice, page=1, page_size=2)
    second_page = daily.paginate_history(alice, page=2, page_size=2)

    assert first_page["total_items"] == 3
    assert first_page["total_pages"] == 2
    assert [item["date"] for item in first_page["items"]] == ["2026-10-19", "2026-10-18"]
    assert [item["date"] for item in second_page["items"]] == ["2026-10-17"]
    assert daily.paginate_history(alice, page=0, page_size=500)["page_size"] == 50


def test_history_hides_unfinished_word(daily, services):
    alice = register(services, "alice")
    puzzle = daily.get_puzzle()
    daily.submit_daily_guess(alice, wrong_daily_words(services, puzzle, 1)[0])

    item = daily.paginate_history(alice)["items"][0]

    assert item["status"] == "in_progress"
    assert item["puzzle_word"] is None


def test_attempt_scores():
    assert [score_for_attempt(n) for n in range(1, 8)] == [10, 8, 6, 4, 3, 2, 0]
