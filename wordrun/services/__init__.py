"""
Services Package

Contains all business logic and service classes.
"""

from .auth_service import AuthService
from .daily_game_service import DailyGameService
from .dictionary_service import DictionaryService
from .errors import (
    ConflictError, ForbiddenError, InvalidInputError, NotFoundError,
    StateCorruptionError, WordRunError,
)
from .guess_evaluator import evaluate_guess
from .infinite_coop_service import InfiniteCoopService
from .infinite_run_service import InfiniteRunService
from .room_service import RoomService, current_turn_player, is_player_turn
from .users_service import UsersService

__all__ = [
    'AuthService', 'DailyGameService', 'DictionaryService', 'UsersService',
    'InfiniteRunService', 'InfiniteCoopService', 'RoomService',
    'evaluate_guess', 'current_turn_player', 'is_player_turn',
    'WordRunError', 'NotFoundError', 'InvalidInputError', 'ConflictError',
    'ForbiddenError', 'StateCorruptionError',
]
