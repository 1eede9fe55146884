"""
Room Socket Registry

Tracks which socket connections watch which game rooms. One instance is
built per application and handed to the socket handlers.
"""

import threading
from typing import Dict, List, Optional


class RoomSocketRegistry:

    def __init__(self):
        self._lock = threading.Lock()
        self._sid_to_room: Dict[str, str] = {}
        self._sid_to_user: Dict[str, str] = {}
        self._user_to_sid: Dict[str, str] = {}

    def join(self, sid: str, user_id: str, room_id: str) -> Optional[str]:
        """Attach a connection to a room; returns the room it watched before, if any."""
        with self._lock:
            previous = self._sid_to_room.get(sid)
            self._sid_to_room[sid] = room_id
            self._sid_to_user[sid] = user_id
            self._user_to_sid[user_id] = sid
            return previous if previous != room_id else None

    def leave(self, sid: str) -> Optional[str]:
        with self._lock:
            return self._sid_to_room.pop(sid, None)

    def drop_sid(self, sid: str) -> Optional[str]:
        """Forget a disconnected socket entirely. Returns the user it belonged to."""
        with self._lock:
            self._sid_to_room.pop(sid, None)
            user_id = self._sid_to_user.pop(sid, None)
            if user_id is not None and self._user_to_sid.get(user_id) == sid:
                del self._user_to_sid[user_id]
            return user_id

    def room_of(self, sid: str) -> Optional[str]:
        with self._lock:
            return self._sid_to_room.get(sid)

    def sid_of(self, user_id: str) -> Optional[str]:
        with self._lock:
            return self._user_to_sid.get(user_id)

    def watched_rooms(self) -> List[str]:
        with self._lock:
            return list(self._sid_to_room.values())

    def watchers(self, room_id: str) -> List[str]:
        with self._lock:
            return [sid for sid, watched in self._sid_to_room.items() if watched == room_id]
