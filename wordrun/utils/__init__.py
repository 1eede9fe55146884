"""
Utilities Package

Contains utility functions, decorators, and helper modules.
"""

from .decorators import require_auth, websocket_auth_required
from .helpers import get_user_identity, normalize_word
from .game_logger import game_logger

__all__ = ['require_auth', 'websocket_auth_required', 'get_user_identity', 'normalize_word', 'game_logger']
