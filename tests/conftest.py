import os
import random
import tempfile

os.environ.setdefault('LOG_DIR', tempfile.mkdtemp(prefix='wordrun-logs-'))

import pytest

from wordrun.config import TestingConfig
from wordrun.container import build_services
from wordrun.services.dictionary_service import DictionaryService
from wordrun.storage import create_memory_stores

POOL_WORDS = ["ALLOY", "LOYAL", "SPEED", "THEME", "ZEBRA"]
EXTRA_WORDS = ["ABIDE", "CRANE", "SLATE", "PLANT", "MOUSE", "GHOST", "EERIE", "ABOUT"]


class RecordingNotifier:
    """Collects every (room_id, event) pushed by the services."""

    def __init__(self):
        self.events = []

    def notify(self, room_id, event):
        self.events.append((room_id, event))

    def kinds(self, room_id=None):
        return [e.kind for r, e in self.events if room_id is None or r == room_id]

    def of_type(self, event_class):
        return [e for _, e in self.events if isinstance(e, event_class)]

    def clear(self):
        self.events.clear()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_services(notifier):
    """Build an in-memory service graph over a chosen word pool."""

    def _make(pool=None, extra=None, seed=7):
        pool_words = list(pool or POOL_WORDS)
        allowed = pool_words + [w for w in (extra if extra is not None else EXTRA_WORDS) if w not in pool_words]
        return build_services(
            TestingConfig,
            stores=create_memory_stores(),
            notifier=notifier,
            dictionary=DictionaryService.from_words(allowed),
            word_pool=DictionaryService.from_words(pool_words),
            rng=random.Random(seed),
        )

    return _make


@pytest.fixture
def services(make_services):
    return make_services()


def register(services, username, password="secret123"):
    result = services.auth.register_user(username, password)
    assert result['success'], result
    return result['user_id']


def wrong_words(services, run, count):
    """Allowed words that are neither the target nor already guessed."""
    guessed = {g.guess_word for g in run.current_guesses}
    candidates = [
        w for w in services.dictionary.get_all_words()
        if w != run.target_word and w not in guessed
    ]
    assert len(candidates) >= count
    return candidates[:count]


@pytest.fixture
def players(services):
    return register(services, "alice"), register(services, "bruno")
