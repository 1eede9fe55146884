"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .game import GuessEvaluation, LetterEvaluation, LetterState
from .run import GuessRecord, HistoryEntry, RunState, RunStatus, WordResult
from .room import Room, RoomPlayer, RoomStatus
from .puzzle import Puzzle, PuzzleStatus, UserPuzzle
from .user import User

__all__ = [
    'GuessEvaluation', 'LetterEvaluation', 'LetterState',
    'GuessRecord', 'HistoryEntry', 'RunState', 'RunStatus', 'WordResult',
    'Room', 'RoomPlayer', 'RoomStatus',
    'Puzzle', 'PuzzleStatus', 'UserPuzzle',
    'User',
]
