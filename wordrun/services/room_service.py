"""
Room Service

Manages cooperative rooms: creation, membership and the turn order.

Turn order is never stored as the source of truth. It is derived from the
room's player order, ``games_played`` and the attempt number:

- games_played even: attempts 1..5 go p1, p2, p1, p2, p1
- games_played odd:  attempts 1..5 go p2, p1, p2, p1, p2
"""

import logging
import uuid
from typing import Optional, Tuple

from ..config.game_settings import ROOM_ID_LENGTH, ROOM_MAX_PLAYERS
from ..models.events import PlayerJoined, PlayerLeft
from ..models.room import Room, RoomPlayer, RoomStatus
from .errors import ConflictError, ForbiddenError, InvalidInputError, NotFoundError, StateCorruptionError

logger = logging.getLogger(__name__)


def current_turn_player(room: Room, attempt_number: int) -> str:
    """User id of the player who must submit ``attempt_number`` of the current word."""
    if len(room.players) != 2:
        raise StateCorruptionError("Room must have exactly 2 players")
    if attempt_number < 1:
        raise ValueError("attempt_number starts at 1")

    opens_with_player1 = room.games_played % 2 == 0
    attempt_is_odd = attempt_number % 2 == 1
    if opens_with_player1 == attempt_is_odd:
        return room.players[0].user_id
    return room.players[1].user_id


def is_player_turn(room: Room, attempt_number: int, user_id: str) -> bool:
    return current_turn_player(room, attempt_number) == user_id


def next_player(room: Room, current_attempt_number: int) -> str:
    return current_turn_player(room, current_attempt_number + 1)


class RoomService:

    def __init__(self, room_store, users_service, notifier, locks):
        self.room_store = room_store
        self.users_service = users_service
        self.notifier = notifier
        self.locks = locks

    def lock_key(self, room_id: str) -> str:
        return f"room:{room_id}"

    def get_room(self, room_id: str) -> Optional[Room]:
        if not isinstance(room_id, str) or not room_id.strip():
            raise InvalidInputError("Room ID must be a non-empty string")
        return self.room_store.get(room_id.strip().upper())

    def require_room(self, room_id: str) -> Room:
        room = self.get_room(room_id)
        if room is None:
            raise NotFoundError("Room not found")
        return room

    def require_member(self, room: Room, user_id: str) -> None:
        if not room.has_player(user_id):
            raise ForbiddenError("You are not in this room")

    def get_user_active_room(self, user_id: str) -> Optional[Room]:
        return self.room_store.find_active_for_user(user_id)

    def create_room(self, user_id: str) -> Tuple[Room, bool]:
        """
        Create a waiting room with the caller as player 1.

        Returns:
            (room, already_in_room): the caller's current room is returned
            instead when they already sit in a waiting or playing room.
        """
        existing = self.get_user_active_room(user_id)
        if existing:
            logger.info(f"User {user_id} already in room {existing.room_id}, returning it")
            return existing, True

        user = self.users_service.find_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        room = Room(
            room_id=self.generate_room_code(),
            created_by=user_id,
            players=[RoomPlayer(user_id=user_id, username=user.username)],
            max_players=ROOM_MAX_PLAYERS,
        )
        self.room_store.insert(room)
        logger.info(f"Room {room.room_id} created by {user.username}")
        return room, False

    def join_room(self, user_id: str, room_id: str) -> Room:
        """Append the caller as the next player; the room starts playing once full."""
        room = self.require_room(room_id)
        with self.locks.hold(self.lock_key(room.room_id)):
            room = self.require_room(room.room_id)

            if room.status is not RoomStatus.WAITING:
                raise ConflictError("Room is no longer available")
            if room.has_player(user_id):
                raise ConflictError("You are already in this room")
            if room.is_full:
                raise ConflictError("Room is full")

            other_room = self.get_user_active_room(user_id)
            if other_room and other_room.room_id != room.room_id:
                raise ConflictError("You are already in another room")

            user = self.users_service.find_by_id(user_id)
            if not user:
                raise NotFoundError("User not found")

            room.players.append(RoomPlayer(user_id=user_id, username=user.username))
            if len(room.players) == room.max_players:
                room.status = RoomStatus.PLAYING

            self.room_store.save(room)
            logger.info(
                f"User {user.username} joined room {room.room_id} "
                f"({len(room.players)}/{room.max_players}, {room.status.value})"
            )
            self.notifier.notify(room.room_id, PlayerJoined(user_id=user_id, username=user.username))
            return room

    def leave_room(self, user_id: str, room_id: str) -> Room:
        """Leave a room that has not started yet. An emptied room is finished."""
        room = self.require_room(room_id)
        with self.locks.hold(self.lock_key(room.room_id)):
            room = self.require_room(room.room_id)
            player = room.get_player(user_id)
            if player is None:
                raise ForbiddenError("You are not in this room")
            if room.status is not RoomStatus.WAITING:
                raise ConflictError("The game already started, abandon it instead")

            room.players = [p for p in room.players if p.user_id != user_id]
            if not room.players:
                room.status = RoomStatus.FINISHED

            self.room_store.save(room)
            logger.info(f"User {player.username} left room {room.room_id}")
            self.notifier.notify(room.room_id, PlayerLeft(
                player_id=user_id,
                player_name=player.username,
                remaining_players=len(room.players),
            ))
            return room

    def create_rematch_room(self, old_room: Room) -> Room:
        """
        Open a playing room for the same pair with the player order swapped,
        so the other player opens the first word. The old room is finished
        and its rematch flags cleared.
        """
        first, second = old_room.players[1], old_room.players[0]
        new_room = Room(
            room_id=self.generate_room_code(),
            created_by=first.user_id,
            players=[
                RoomPlayer(user_id=first.user_id, username=first.username),
                RoomPlayer(user_id=second.user_id, username=second.username),
            ],
            max_players=old_room.max_players,
            status=RoomStatus.PLAYING,
            mode=old_room.mode,
        )
        self.room_store.insert(new_room)

        for player in old_room.players:
            player.wants_rematch = False
        old_room.status = RoomStatus.FINISHED
        self.room_store.save(old_room)

        logger.info(f"Rematch room {new_room.room_id} created from {old_room.room_id}")
        return new_room

    def generate_room_code(self) -> str:
        """Six character room code, retried until unused."""
        for _ in range(5):
            candidate = uuid.uuid4().hex[:ROOM_ID_LENGTH].upper()
            if not self.room_store.exists(candidate):
                return candidate
        return uuid.uuid4().hex[:ROOM_ID_LENGTH + 4].upper()
