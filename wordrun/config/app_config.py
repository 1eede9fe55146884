"""
Application configuration.

Every setting comes from the environment (optionally seeded from a
``config.env`` file beside this module). Without ``MONGO_URI`` the server
keeps its state in memory.
"""

import os
from dotenv import load_dotenv

_CONFIG_DIR = os.path.dirname(os.path.abspath(__file__))

load_dotenv(os.path.join(_CONFIG_DIR, 'config.env'))


def _env_bool(name, default=False):
    return os.getenv(name, str(default)).strip().lower() in ('1', 'true', 'yes')


def _env_int(name, default):
    return int(os.getenv(name, default))


class Config:
    """Settings shared by every environment."""

    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = _env_bool('DEBUG')
    TESTING = False

    HOST = os.getenv('HOST', '127.0.0.1')
    PORT = _env_int('PORT', 5000)

    MONGO_URI = os.getenv('MONGO_URI')
    MONGO_DB_NAME = os.getenv('MONGO_DB_NAME', 'wordrun')

    JWT_SECRET = os.getenv('JWT_SECRET', 'dev-jwt-secret-change-in-production')
    JWT_EXPIRATION_DAYS = _env_int('JWT_EXPIRATION_DAYS', 7)

    WORD_LENGTH = _env_int('WORD_LENGTH', 5)
    SOLO_MAX_ATTEMPTS = _env_int('SOLO_MAX_ATTEMPTS', 4)
    COOP_MAX_ATTEMPTS = _env_int('COOP_MAX_ATTEMPTS', 5)
    DAILY_MAX_ATTEMPTS = _env_int('DAILY_MAX_ATTEMPTS', 6)
    WORDS_POOL_PATH = os.getenv('WORDS_POOL_PATH', os.path.join(_CONFIG_DIR, 'words.json'))
    # Allow-list for guesses; the pool itself when unset
    WORDS_DICTIONARY_PATH = os.getenv('WORDS_DICTIONARY_PATH', WORDS_POOL_PATH)

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = os.getenv('LOG_DIR', 'logs')


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False


class TestingConfig(Config):
    TESTING = True
    DEBUG = True
    MONGO_URI = None
    JWT_SECRET = 'testing-jwt-secret'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
