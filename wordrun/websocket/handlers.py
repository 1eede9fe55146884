"""
WebSocket Event Handlers

Lets clients watch a coop room in real time. Game actions go through the
HTTP API; the services push room events to watchers through the notifier.
"""

from flask import request
from flask_socketio import emit, join_room, leave_room
from ..controllers.coop_controller import build_room_view
from ..services.errors import WordRunError
from ..utils.decorators import websocket_auth_required
from ..utils.game_logger import game_logger
from .notifier import socket_room_name


def register_websocket_handlers(socketio, services, registry):
    """
    Register all WebSocket event handlers.

    Args:
        socketio: SocketIO instance of the app
        services: Service container used by the handlers
        registry: RoomSocketRegistry tracking which socket watches which room
    """

    def _emit_error(event, error):
        if isinstance(error, WordRunError):
            emit('error', {'event': event, 'error': error.message, 'status_code': error.status_code})
        else:
            game_logger.logger.error(f"WebSocket {event} failed for {request.sid}: {error}")
            emit('error', {'event': event, 'error': 'Internal server error', 'status_code': 500})

    @socketio.on('connect')
    def handle_connect():
        """Handle WebSocket connection."""
        game_logger.logger.debug(f"WebSocket connected: {request.sid}")

    @socketio.on('disconnect')
    def handle_disconnect(*args):
        """Forget the connection. Leaving a socket does not affect the game."""
        room_id = registry.room_of(request.sid)
        user_id = registry.drop_sid(request.sid)
        if user_id:
            game_logger.logger.info(f"WebSocket: user {user_id} disconnected from room {room_id}")

    @socketio.on('room:join')
    @websocket_auth_required
    def handle_room_join(data, user=None):
        """Start watching a room the user belongs to and receive its state."""
        room_id = data.get('room_id')
        if not room_id:
            emit('error', {'event': 'room:join', 'error': 'Room ID is required'})
            return

        try:
            room = services.rooms.require_room(room_id)
            services.rooms.require_member(room, user['id'])

            other_sid = registry.sid_of(user['id'])
            if other_sid and other_sid != request.sid:
                game_logger.logger.info(f"WebSocket: {user['username']} moved from {other_sid} to {request.sid}")

            previous = registry.join(request.sid, user['id'], room.room_id)
            if previous:
                leave_room(socket_room_name(previous))
            join_room(socket_room_name(room.room_id))

            game_logger.logger.info(f"WebSocket: {user['username']} watching room {room.room_id}")
            emit('room:state', {'success': True, **build_room_view(services, room, user['id'])})
        except Exception as e:
            _emit_error('room:join', e)

    @socketio.on('room:leave')
    @websocket_auth_required
    def handle_room_leave(data, user=None):
        """Stop watching the current room."""
        room_id = registry.leave(request.sid)
        if room_id:
            leave_room(socket_room_name(room_id))
            game_logger.logger.info(f"WebSocket: {user['username']} stopped watching room {room_id}")
        emit('room:left', {'room_id': room_id})

    @socketio.on('room:rematch-request')
    @websocket_auth_required
    def handle_rematch_request(data, user=None):
        room_id = data.get('room_id') or registry.room_of(request.sid)
        if not room_id:
            emit('error', {'event': 'room:rematch-request', 'error': 'Room ID is required'})
            return
        try:
            services.coop_runs.request_rematch(room_id, user['id'])
        except Exception as e:
            _emit_error('room:rematch-request', e)

    @socketio.on('room:rematch-response')
    @websocket_auth_required
    def handle_rematch_response(data, user=None):
        """Answer a rematch request; on acceptance the new room id is broadcast."""
        room_id = data.get('room_id') or registry.room_of(request.sid)
        accepted = data.get('accepted')
        if not room_id or not isinstance(accepted, bool):
            emit('error', {'event': 'room:rematch-response', 'error': 'Room ID and accepted flag are required'})
            return
        try:
            _old_room, new_room, _new_run = services.coop_runs.respond_rematch(room_id, user['id'], accepted)
            if new_room is not None:
                game_logger.log_game_event(
                    new_room.room_id, 'rematch_started',
                    user_id=user['id'], username=user['username'], previous_room_id=room_id,
                )
        except Exception as e:
            _emit_error('room:rematch-response', e)
