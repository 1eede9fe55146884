"""
In-Memory Storage

Thread-safe record stores used when no MongoDB is configured and in tests.
Records are kept as documents and rebuilt on every read, so callers never
share mutable state with the store.
"""

import copy
import threading
from typing import Callable, Dict, List, Optional, Tuple

from bson.objectid import ObjectId

from ..models.puzzle import Puzzle, UserPuzzle
from ..models.room import Room, RoomStatus
from ..models.run import RunState, RunStatus, utc_now
from ..models.user import User
from ..services.errors import ConflictError, NotFoundError


class _VersionedMemoryStore:
    """Document store with compare-and-swap saves on a ``version`` field."""

    record_class = None
    id_attr = None

    def __init__(self):
        self._documents: Dict[str, dict] = {}
        self._lock = threading.Lock()

    def insert(self, record):
        record_id = getattr(record, self.id_attr)
        with self._lock:
            if record_id in self._documents:
                raise ConflictError(f"Record {record_id} already exists")
            clash = self._clash(record)
            if clash:
                raise ConflictError(clash)
            self._documents[record_id] = copy.deepcopy(record.to_document())
        return record

    def _clash(self, record) -> Optional[str]:
        """Uniqueness rule beyond the id, checked under the store lock."""
        return None

    def get(self, record_id: str):
        with self._lock:
            doc = self._documents.get(record_id)
            return self.record_class.from_document(copy.deepcopy(doc)) if doc else None

    def exists(self, record_id: str) -> bool:
        with self._lock:
            return record_id in self._documents

    def save(self, record):
        """Persist ``record`` only if nobody saved it since it was read."""
        record_id = getattr(record, self.id_attr)
        with self._lock:
            stored = self._documents.get(record_id)
            if stored is None:
                raise NotFoundError(f"Record {record_id} not found")
            if stored["version"] != record.version:
                raise ConflictError("The game was updated by another request, try again")
            record.version += 1
            record.updated_at = utc_now()
            self._documents[record_id] = copy.deepcopy(record.to_document())
        return record

    def _find_all(self, predicate: Callable[[dict], bool]) -> List:
        with self._lock:
            matches = [copy.deepcopy(doc) for doc in self._documents.values() if predicate(doc)]
        return [self.record_class.from_document(doc) for doc in matches]

    def _find_last(self, predicate: Callable[[dict], bool]):
        matches = self._find_all(predicate)
        return matches[-1] if matches else None


class InMemoryRunStore(_VersionedMemoryStore):
    record_class = RunState
    id_attr = "run_id"

    def find_active_for_user(self, user_id: str) -> Optional[RunState]:
        return self._find_last(lambda d: (
            d["user_id"] == user_id
            and not d["is_multiplayer"]
            and d["status"] == RunStatus.ACTIVE.value
        ))

    def find_latest_for_user(self, user_id: str) -> Optional[RunState]:
        return self._find_last(lambda d: d["user_id"] == user_id and not d["is_multiplayer"])

    def find_active_for_room(self, room_id: str) -> Optional[RunState]:
        return self._find_last(lambda d: (
            d["room_id"] == room_id and d["status"] == RunStatus.ACTIVE.value
        ))

    def find_latest_for_room(self, room_id: str) -> Optional[RunState]:
        return self._find_last(lambda d: d["room_id"] == room_id)


class InMemoryRoomStore(_VersionedMemoryStore):
    record_class = Room
    id_attr = "room_id"

    def find_active_for_user(self, user_id: str) -> Optional[Room]:
        active = (RoomStatus.WAITING.value, RoomStatus.PLAYING.value)
        return self._find_last(lambda d: (
            d["status"] in active
            and any(p["user_id"] == user_id for p in d["players"])
        ))


class InMemoryPuzzleStore(_VersionedMemoryStore):
    record_class = Puzzle
    id_attr = "puzzle_id"

    def _clash(self, record) -> Optional[str]:
        if any(d["date"] == record.date for d in self._documents.values()):
            return f"A puzzle for {record.date} already exists"
        return None

    def find_by_date(self, date: str) -> Optional[Puzzle]:
        return self._find_last(lambda d: d["date"] == date)


class InMemoryUserPuzzleStore(_VersionedMemoryStore):
    record_class = UserPuzzle
    id_attr = "user_puzzle_id"

    def _clash(self, record) -> Optional[str]:
        if any(d["user_id"] == record.user_id and d["date"] == record.date
               for d in self._documents.values()):
            return "Daily puzzle already started"
        return None

    def find_for_user(self, user_id: str, date: str) -> Optional[UserPuzzle]:
        return self._find_last(lambda d: d["user_id"] == user_id and d["date"] == date)

    def list_for_user(self, user_id: str, skip: int, limit: int) -> Tuple[List[UserPuzzle], int]:
        """Newest day first, with the total count."""
        entries = self._find_all(lambda d: d["user_id"] == user_id)
        entries.sort(key=lambda p: (p.date, p.created_at), reverse=True)
        return entries[skip:skip + limit], len(entries)


class InMemoryUserStore:

    def __init__(self):
        self._documents: Dict[str, dict] = {}
        self._lock = threading.Lock()

    def new_id(self) -> str:
        return str(ObjectId())

    def insert(self, user: User) -> User:
        with self._lock:
            if any(d["username"] == user.username for d in self._documents.values()):
                raise ConflictError("Username already exists")
            self._documents[user.id] = copy.deepcopy(user.to_document())
        return user

    def get(self, user_id: str) -> Optional[User]:
        with self._lock:
            doc = self._documents.get(user_id)
            return User.from_document(copy.deepcopy(doc)) if doc else None

    def find_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            for doc in self._documents.values():
                if doc["username"] == username:
                    return User.from_document(copy.deepcopy(doc))
        return None

    def set_last_login(self, user_id: str, when) -> None:
        with self._lock:
            if user_id in self._documents:
                self._documents[user_id]["last_login"] = when

    def update_progress(self, user_id: str, status: str, current_score: int,
                        record: Optional[int] = None) -> Optional[User]:
        with self._lock:
            doc = self._documents.get(user_id)
            if doc is None:
                return None
            doc["infinite_status"] = status
            doc["infinite_current_score"] = current_score
            if record is not None:
                doc["infinite_record"] = max(doc.get("infinite_record", 0), record)
            return User.from_document(copy.deepcopy(doc))

    def add_daily_result(self, user_id: str, score: int) -> Optional[User]:
        with self._lock:
            doc = self._documents.get(user_id)
            if doc is None:
                return None
            doc["daily_streak"] = doc.get("daily_streak", 0) + 1
            doc["daily_score"] = doc.get("daily_score", 0) + score
            return User.from_document(copy.deepcopy(doc))

    def list_ranking(self, limit: int = 50) -> List[User]:
        with self._lock:
            docs = [copy.deepcopy(d) for d in self._documents.values()]
        docs.sort(key=lambda d: (-d.get("infinite_record", 0), d["username"]))
        return [User.from_document(d) for d in docs[:limit]]
