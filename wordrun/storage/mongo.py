"""
MongoDB Storage

pymongo-backed record stores. Runs and rooms are saved with a
compare-and-swap on their ``version`` field, so two writers that read the
same state cannot both win.
"""

from typing import List, Optional, Tuple

import pymongo
from bson.objectid import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..models.puzzle import Puzzle, UserPuzzle
from ..models.room import Room, RoomStatus
from ..models.run import RunState, RunStatus, utc_now
from ..models.user import User
from ..services.errors import ConflictError


class _VersionedMongoStore:
    record_class = None
    id_attr = None

    def __init__(self, collection):
        self.collection = collection

    def insert(self, record):
        try:
            self.collection.insert_one(record.to_document())
        except DuplicateKeyError as e:
            raise ConflictError(f"Record {getattr(record, self.id_attr)} already exists") from e
        return record

    def get(self, record_id: str):
        doc = self.collection.find_one({"_id": record_id})
        return self.record_class.from_document(doc) if doc else None

    def exists(self, record_id: str) -> bool:
        return self.collection.count_documents({"_id": record_id}, limit=1) > 0

    def save(self, record):
        expected_version = record.version
        record.version = expected_version + 1
        record.updated_at = utc_now()
        result = self.collection.replace_one(
            {"_id": getattr(record, self.id_attr), "version": expected_version},
            record.to_document(),
        )
        if result.matched_count == 0:
            record.version = expected_version
            raise ConflictError("The game was updated by another request, try again")
        return record

    def _find_latest(self, query: dict):
        doc = self.collection.find_one(query, sort=[("created_at", pymongo.DESCENDING)])
        return self.record_class.from_document(doc) if doc else None


class MongoRunStore(_VersionedMongoStore):
    record_class = RunState
    id_attr = "run_id"

    def __init__(self, collection):
        super().__init__(collection)
        self.collection.create_index([("user_id", 1), ("status", 1)])
        self.collection.create_index([("room_id", 1), ("status", 1)])

    def find_active_for_user(self, user_id: str) -> Optional[RunState]:
        return self._find_latest({
            "user_id": user_id,
            "is_multiplayer": False,
            "status": RunStatus.ACTIVE.value,
        })

    def find_latest_for_user(self, user_id: str) -> Optional[RunState]:
        return self._find_latest({"user_id": user_id, "is_multiplayer": False})

    def find_active_for_room(self, room_id: str) -> Optional[RunState]:
        return self._find_latest({"room_id": room_id, "status": RunStatus.ACTIVE.value})

    def find_latest_for_room(self, room_id: str) -> Optional[RunState]:
        return self._find_latest({"room_id": room_id})


class MongoRoomStore(_VersionedMongoStore):
    record_class = Room
    id_attr = "room_id"

    def __init__(self, collection):
        super().__init__(collection)
        self.collection.create_index([("status", 1), ("created_at", -1)])
        self.collection.create_index("players.user_id")

    def find_active_for_user(self, user_id: str) -> Optional[Room]:
        return self._find_latest({
            "players.user_id": user_id,
            "status": {"$in": [RoomStatus.WAITING.value, RoomStatus.PLAYING.value]},
        })


class MongoPuzzleStore(_VersionedMongoStore):
    record_class = Puzzle
    id_attr = "puzzle_id"

    def __init__(self, collection):
        super().__init__(collection)
        self.collection.create_index("date", unique=True)

    def find_by_date(self, date: str) -> Optional[Puzzle]:
        doc = self.collection.find_one({"date": date})
        return Puzzle.from_document(doc) if doc else None


class MongoUserPuzzleStore(_VersionedMongoStore):
    record_class = UserPuzzle
    id_attr = "user_puzzle_id"

    def __init__(self, collection):
        super().__init__(collection)
        self.collection.create_index([("user_id", 1), ("date", -1)], unique=True)

    def find_for_user(self, user_id: str, date: str) -> Optional[UserPuzzle]:
        doc = self.collection.find_one({"user_id": user_id, "date": date})
        return UserPuzzle.from_document(doc) if doc else None

    def list_for_user(self, user_id: str, skip: int, limit: int) -> Tuple[List[UserPuzzle], int]:
        query = {"user_id": user_id}
        cursor = self.collection.find(query).sort(
            [("date", pymongo.DESCENDING), ("created_at", pymongo.DESCENDING)]
        ).skip(skip).limit(limit)
        return [UserPuzzle.from_document(doc) for doc in cursor], self.collection.count_documents(query)


class MongoUserStore:

    def __init__(self, collection):
        self.collection = collection
        # Create unique index on username
        self.collection.create_index("username", unique=True)
        self.collection.create_index([("infinite_record", -1)])

    def new_id(self) -> str:
        return str(ObjectId())

    def insert(self, user: User) -> User:
        try:
            self.collection.insert_one(user.to_document())
        except DuplicateKeyError as e:
            raise ConflictError("Username already exists") from e
        return user

    def get(self, user_id: str) -> Optional[User]:
        doc = self.collection.find_one({"_id": user_id})
        return User.from_document(doc) if doc else None

    def find_by_username(self, username: str) -> Optional[User]:
        doc = self.collection.find_one({"username": username})
        return User.from_document(doc) if doc else None

    def set_last_login(self, user_id: str, when) -> None:
        self.collection.update_one({"_id": user_id}, {"$set": {"last_login": when}})

    def update_progress(self, user_id: str, status: str, current_score: int,
                        record: Optional[int] = None) -> Optional[User]:
        update = {
            "$set": {
                "infinite_status": status,
                "infinite_current_score": current_score,
            }
        }
        if record is not None:
            # Record never decreases
            update["$max"] = {"infinite_record": record}
        doc = self.collection.find_one_and_update(
            {"_id": user_id}, update, return_document=ReturnDocument.AFTER
        )
        return User.from_document(doc) if doc else None

    def add_daily_result(self, user_id: str, score: int) -> Optional[User]:
        doc = self.collection.find_one_and_update(
            {"_id": user_id},
            {"$inc": {"daily_streak": 1, "daily_score": score}},
            return_document=ReturnDocument.AFTER,
        )
        return User.from_document(doc) if doc else None

    def list_ranking(self, limit: int = 50) -> List[User]:
        cursor = self.collection.find().sort(
            [("infinite_record", pymongo.DESCENDING), ("username", pymongo.ASCENDING)]
        ).limit(limit)
        return [User.from_document(doc) for doc in cursor]
