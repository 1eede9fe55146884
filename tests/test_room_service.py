import pytest

from conftest import register
from wordrun.models.events import PlayerJoined, PlayerLeft
from wordrun.models.room import RoomStatus
from wordrun.services.errors import ConflictError, ForbiddenError, InvalidInputError, NotFoundError


@pytest.fixture
def rooms(services):
    return services.rooms


def test_create_room_puts_creator_first(rooms, players):
    alice, _ = players
    room, already_in_room = rooms.create_room(alice)

    assert not already_in_room
    assert room.status is RoomStatus.WAITING
    assert [p.user_id for p in room.players] == [alice]
    assert len(room.room_id) == 6
    assert room.room_id == room.room_id.upper()


def test_create_room_returns_existing_room(rooms, players):
    alice, _ = players
    room, _ = rooms.create_room(alice)
    again, already_in_room = rooms.create_room(alice)

    assert already_in_room
    assert again.room_id == room.room_id


def test_second_player_fills_the_room(rooms, players, notifier):
    alice, bruno = players
    room, _ = rooms.create_room(alice)

    joined = rooms.join_room(bruno, room.room_id.lower())

    assert joined.status is RoomStatus.PLAYING
    assert [p.user_id for p in joined.players] == [alice, bruno]
    events = notifier.of_type(PlayerJoined)
    assert events[-1].user_id == bruno
    assert events[-1].username == "bruno"


def test_join_unknown_room(rooms, players):
    with pytest.raises(NotFoundError):
        rooms.join_room(players[0], "NOPE42")


def test_cannot_join_twice(rooms, players):
    alice, _ = players
    room, _ = rooms.create_room(alice)

    with pytest.raises(ConflictError):
        rooms.join_room(alice, room.room_id)


def test_cannot_join_a_started_room(services, rooms, players):
    alice, bruno = players
    carla = register(services, "carla")
    room, _ = rooms.create_room(alice)
    rooms.join_room(bruno, room.room_id)

    with pytest.raises(ConflictError):
        rooms.join_room(carla, room.room_id)


def test_cannot_join_while_in_another_room(services, rooms, players):
    alice, bruno = players
    first, _ = rooms.create_room(alice)
    rooms.create_room(bruno)

    with pytest.raises(ConflictError):
        rooms.join_room(bruno, first.room_id)


def test_leave_waiting_room(rooms, players, notifier):
    alice, _ = players
    room, _ = rooms.create_room(alice)

    left = rooms.leave_room(alice, room.room_id)

    assert left.players == []
    assert left.status is RoomStatus.FINISHED
    assert notifier.of_type(PlayerLeft)[-1].remaining_players == 0
    assert rooms.get_user_active_room(alice) is None


def test_leave_requires_membership(rooms, players):
    alice, bruno = players
    room, _ = rooms.create_room(alice)

    with pytest.raises(ForbiddenError):
        rooms.leave_room(bruno, room.room_id)


def test_cannot_leave_a_started_room(rooms, players):
    alice, bruno = players
    room, _ = rooms.create_room(alice)
    rooms.join_room(bruno, room.room_id)

    with pytest.raises(ConflictError):
        rooms.leave_room(alice, room.room_id)


def test_active_room_lookup(rooms, players):
    alice, bruno = players
    assert rooms.get_user_active_room(alice) is None

    room, _ = rooms.create_room(alice)
    rooms.join_room(bruno, room.room_id)

    assert rooms.get_user_active_room(bruno).room_id == room.room_id


def test_room_id_must_be_text(services):
    with pytest.raises(InvalidInputError):
        services.rooms.get_room(123)
    with pytest.raises(InvalidInputError):
        services.rooms.require_room("   ")
