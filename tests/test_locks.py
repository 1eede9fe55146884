import threading
import time

from conftest import register
from wordrun.services.locks import KeyedLocks


def test_entries_are_dropped_when_released():
    locks = KeyedLocks()

    with locks.hold("room:ABC123"):
        assert len(locks) == 1

    assert len(locks) == 0


def test_same_key_is_reentrant():
    locks = KeyedLocks()

    with locks.hold("solo:alice"):
        with locks.hold("solo:alice"):
            assert len(locks) == 1

    assert len(locks) == 0


def test_same_key_is_exclusive():
    locks = KeyedLocks()
    inside = []
    overlaps = []

    def work():
        with locks.hold("room:ABC123"):
            inside.append(1)
            if len(inside) > 1:
                overlaps.append(1)
            time.sleep(0.01)
            inside.pop()

    threads = [threading.Thread(target=work) for _ in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert overlaps == []
    assert len(locks) == 0


def test_many_solo_runs_leave_no_locks(services):
    for index in range(50):
        user_id = register(services, f"player{index}")
        services.solo_runs.start_run(user_id)
        services.solo_runs.abandon_run(user_id)

    assert len(services.locks) == 0
