"""
Configuration Package

Contains all configuration-related files and settings.

This package separates two types of configuration:
- app_config.py: Flask application configuration (environment-based)
- game_settings.py: Game constants and the word file loader
"""

from .app_config import Config, DevelopmentConfig, ProductionConfig, TestingConfig, config
from .game_settings import (
    WORD_LENGTH, SOLO_MAX_ATTEMPTS, COOP_MAX_ATTEMPTS, ROOM_MAX_PLAYERS,
    DAILY_MAX_ATTEMPTS, DAILY_ATTEMPT_SCORES, load_word_file
)

__all__ = [
    # App configuration
    'Config', 'DevelopmentConfig', 'ProductionConfig', 'TestingConfig', 'config',
    # Game rules
    'WORD_LENGTH', 'SOLO_MAX_ATTEMPTS', 'COOP_MAX_ATTEMPTS', 'ROOM_MAX_PLAYERS',
    'DAILY_MAX_ATTEMPTS', 'DAILY_ATTEMPT_SCORES', 'load_word_file'
]
