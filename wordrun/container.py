"""
Service container.

Builds the service graph once per application from a config object and
hands it to the Flask app (``app.services``) and the socket handlers.
"""

from dataclasses import dataclass
from typing import Optional

from .services.auth_service import AuthService
from .services.daily_game_service import DailyGameService
from .services.dictionary_service import DictionaryService
from .services.infinite_coop_service import InfiniteCoopService
from .services.infinite_run_service import InfiniteRunService
from .services.locks import KeyedLocks
from .services.notifications import LoggingNotifier
from .services.room_service import RoomService
from .services.users_service import UsersService
from .storage import Stores, create_stores


@dataclass
class Services:
    stores: Stores
    auth: AuthService
    users: UsersService
    dictionary: DictionaryService
    word_pool: DictionaryService
    solo_runs: InfiniteRunService
    rooms: RoomService
    coop_runs: InfiniteCoopService
    daily: DailyGameService
    locks: KeyedLocks

    def set_notifier(self, notifier) -> None:
        self.rooms.notifier = notifier
        self.coop_runs.notifier = notifier


def build_services(config, stores: Optional[Stores] = None, notifier=None,
                   dictionary: Optional[DictionaryService] = None,
                   word_pool: Optional[DictionaryService] = None, rng=None) -> Services:
    stores = stores or create_stores(config)
    notifier = notifier or LoggingNotifier()
    word_length = getattr(config, 'WORD_LENGTH', 5)

    word_pool = word_pool or DictionaryService(config.WORDS_POOL_PATH, word_length)
    if dictionary is None:
        if config.WORDS_DICTIONARY_PATH == config.WORDS_POOL_PATH:
            dictionary = word_pool
        else:
            dictionary = DictionaryService(config.WORDS_DICTIONARY_PATH, word_length)

    locks = KeyedLocks()
    users = UsersService(stores.users)
    auth = AuthService(stores.users, config.JWT_SECRET, getattr(config, 'JWT_EXPIRATION_DAYS', 7))
    rooms = RoomService(stores.rooms, users, notifier, locks)
    solo_runs = InfiniteRunService(
        stores.runs, users, dictionary, word_pool, config.SOLO_MAX_ATTEMPTS, locks, rng=rng,
    )
    coop_runs = InfiniteCoopService(
        stores.runs, users, dictionary, word_pool, config.COOP_MAX_ATTEMPTS, locks,
        rooms, notifier, rng=rng,
    )
    daily = DailyGameService(
        stores.puzzles, stores.user_puzzles, users, dictionary, word_pool, locks,
        max_attempts=getattr(config, 'DAILY_MAX_ATTEMPTS', 6),
    )
    return Services(
        stores=stores, auth=auth, users=users, dictionary=dictionary, word_pool=word_pool,
        solo_runs=solo_runs, rooms=rooms, coop_runs=coop_runs, daily=daily, locks=locks,
    )
