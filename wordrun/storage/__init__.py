"""
Storage Package

Record stores for runs, rooms, users and daily puzzles. MongoDB is used when a
connection string is configured, in-memory stores otherwise.
"""

import logging
from collections import namedtuple

from .memory import (
    InMemoryPuzzleStore, InMemoryRoomStore, InMemoryRunStore, InMemoryUserPuzzleStore, InMemoryUserStore,
)
from .mongo import MongoPuzzleStore, MongoRoomStore, MongoRunStore, MongoUserPuzzleStore, MongoUserStore

logger = logging.getLogger(__name__)

Stores = namedtuple('Stores', ['runs', 'rooms', 'users', 'puzzles', 'user_puzzles', 'client'])


def create_memory_stores() -> Stores:
    return Stores(
        InMemoryRunStore(), InMemoryRoomStore(), InMemoryUserStore(),
        InMemoryPuzzleStore(), InMemoryUserPuzzleStore(), None,
    )


def create_mongo_stores(mongo_uri: str, db_name: str) -> Stores:
    """Connect to MongoDB and build the collection-backed stores."""
    from pymongo.mongo_client import MongoClient
    from pymongo.server_api import ServerApi

    client = MongoClient(mongo_uri, server_api=ServerApi('1'))

    # Test connection
    try:
        client.admin.command('ping')
        logger.info("Successfully connected to MongoDB")
    except Exception as e:
        logger.error(f"MongoDB connection error: {e}")
        raise

    db = client[db_name]
    return Stores(
        MongoRunStore(db.infinite_runs),
        MongoRoomStore(db.infinite_rooms),
        MongoUserStore(db.users),
        MongoPuzzleStore(db.puzzles),
        MongoUserPuzzleStore(db.user_puzzles),
        client,
    )


def create_stores(config) -> Stores:
    mongo_uri = getattr(config, 'MONGO_URI', None)
    if mongo_uri:
        return create_mongo_stores(mongo_uri, getattr(config, 'MONGO_DB_NAME', 'wordrun'))
    logger.warning("MONGO_URI not configured, using in-memory storage")
    return create_memory_stores()


__all__ = [
    'Stores', 'create_stores', 'create_memory_stores', 'create_mongo_stores',
    'InMemoryRunStore', 'InMemoryRoomStore', 'InMemoryUserStore',
    'InMemoryPuzzleStore', 'InMemoryUserPuzzleStore',
    'MongoRunStore', 'MongoRoomStore', 'MongoUserStore',
    'MongoPuzzleStore', 'MongoUserPuzzleStore',
]
