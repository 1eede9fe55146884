"""
Coop Controller

HTTP endpoints of the two-player cooperative infinite mode: rooms, turns,
guesses and the rematch handshake.
"""

from flask import Blueprint, request, current_app
from ..services.errors import InvalidInputError, NotFoundError
from ..services.run_engine import OUTCOME_CONTINUE, OUTCOME_UNCHANGED
from ..utils.decorators import require_auth
from ..utils.game_logger import game_logger
from .responses import error_response, get_json_body, success_response

coop_bp = Blueprint('coop', __name__)


def build_room_view(services, room, viewer_id):
    """Room state for a member, with the turn recomputed from the room."""
    run = services.coop_runs.get_coop_run(room.room_id)
    if run is None and room.current_run_id:
        run = services.stores.runs.get(room.current_run_id)

    turn_player_id = None
    if run is not None:
        turn_player_id = services.coop_runs.expected_turn_player(room, run)

    return {
        'room': room.to_public_dict(),
        'run': run.to_public_dict() if run else None,
        'current_turn_player': {
            'user_id': turn_player_id,
            'username': room.username_of(turn_player_id),
        } if turn_player_id else None,
        'is_my_turn': turn_player_id == viewer_id,
    }


def _resolve_room_id(data):
    """Room named in the body, or the caller's active room."""
    room_id = data.get('room_id')
    if room_id:
        return room_id
    room = current_app.services.rooms.get_user_active_room(request.user['id'])
    if room is None:
        raise NotFoundError("You are not in an active room")
    return room.room_id


def _log_transition(result):
    if result.outcome in (OUTCOME_CONTINUE, OUTCOME_UNCHANGED):
        return
    game_logger.log_game_event(
        result.run.room_id,
        result.outcome,
        request.remote_addr or 'unknown',
        user_id=request.user['id'],
        username=request.user['username'],
        run_id=result.run.run_id,
        current_score=result.run.current_score,
        final_score=result.final_score,
        word=result.finished_word.word if result.finished_word else None,
    )


@coop_bp.route('/my-room', methods=['GET'])
@require_auth
def get_my_room():
    """The caller's waiting or playing room, if any."""
    try:
        user_id = request.user['id']
        room = current_app.services.rooms.get_user_active_room(user_id)
        if room is None:
            return success_response('get_my_room', {'room': None})
        return success_response('get_my_room', build_room_view(current_app.services, room, user_id), room.room_id)
    except Exception as e:
        return error_response('get_my_room', e)


@coop_bp.route('/rooms', methods=['POST'])
@require_auth
def create_room():
    try:
        user_id = request.user['id']
        game_logger.log_user_action(request, 'create_room')

        room, already_in_room = current_app.services.rooms.create_room(user_id)
        data = build_room_view(current_app.services, room, user_id)
        data['already_in_room'] = already_in_room
        status_code = 200 if already_in_room else 201
        return success_response('create_room', data, room.room_id, status_code)
    except Exception as e:
        return error_response('create_room', e)


@coop_bp.route('/rooms/<room_id>/join', methods=['POST'])
@require_auth
def join_room(room_id):
    """Join a waiting room; the shared run starts once the room is full."""
    try:
        user_id = request.user['id']
        game_logger.log_user_action(request, 'join_room', room_id)

        room, _run = current_app.services.coop_runs.join_room(user_id, room_id)
        return success_response('join_room', build_room_view(current_app.services, room, user_id), room.room_id)
    except Exception as e:
        return error_response('join_room', e, room_id)


@coop_bp.route('/rooms/<room_id>/leave', methods=['POST'])
@require_auth
def leave_room(room_id):
    try:
        game_logger.log_user_action(request, 'leave_room', room_id)
        room = current_app.services.rooms.leave_room(request.user['id'], room_id)
        return success_response('leave_room', {'room': room.to_public_dict()}, room.room_id)
    except Exception as e:
        return error_response('leave_room', e, room_id)


@coop_bp.route('/rooms/<room_id>', methods=['GET'])
@require_auth
def get_room(room_id):
    try:
        user_id = request.user['id']
        rooms = current_app.services.rooms
        room = rooms.require_room(room_id)
        rooms.require_member(room, user_id)
        return success_response('get_room', build_room_view(current_app.services, room, user_id), room.room_id)
    except Exception as e:
        return error_response('get_room', e, room_id)


@coop_bp.route('/guess', methods=['POST'])
@require_auth
def submit_guess():
    """Submit the guess for the current attempt; only the player whose turn it is may."""
    room_id = None
    try:
        data = get_json_body()
        guess = data.get('guess', data.get('guess_word'))
        if guess is None:
            raise InvalidInputError("Guess word is required")

        room_id = _resolve_room_id(data)
        game_logger.log_user_action(request, 'submit_coop_guess', room_id, guess=guess)

        result = current_app.services.coop_runs.submit_coop_guess(room_id, request.user['id'], guess)
        _log_transition(result)
        return success_response('submit_coop_guess', result.to_dict(), room_id)
    except Exception as e:
        return error_response('submit_coop_guess', e, room_id)


@coop_bp.route('/abandon', methods=['POST'])
@require_auth
def abandon_run():
    room_id = None
    try:
        room_id = _resolve_room_id(get_json_body())
        game_logger.log_user_action(request, 'abandon_coop_run', room_id)

        result = current_app.services.coop_runs.abandon_coop_run(room_id, request.user['id'])
        _log_transition(result)
        return success_response('abandon_coop_run', result.to_dict(), room_id)
    except Exception as e:
        return error_response('abandon_coop_run', e, room_id)


@coop_bp.route('/rooms/<room_id>/rematch', methods=['POST'])
@require_auth
def request_rematch(room_id):
    try:
        game_logger.log_user_action(request, 'request_rematch', room_id)
        room = current_app.services.coop_runs.request_rematch(room_id, request.user['id'])
        return success_response('request_rematch', {'room': room.to_public_dict()}, room.room_id)
    except Exception as e:
        return error_response('request_rematch', e, room_id)


@coop_bp.route('/rooms/<room_id>/rematch/respond', methods=['POST'])
@require_auth
def respond_rematch(room_id):
    """Accept or refuse the other player's rematch request."""
    try:
        data = get_json_body()
        accepted = data.get('accepted')
        if not isinstance(accepted, bool):
            raise InvalidInputError("'accepted' must be true or false")

        game_logger.log_user_action(request, 'respond_rematch', room_id, accepted=accepted)

        old_room, new_room, new_run = current_app.services.coop_runs.respond_rematch(
            room_id, request.user['id'], accepted)

        response_data = {
            'accepted': accepted,
            'room': old_room.to_public_dict(),
            'new_room_id': new_room.room_id if new_room else None,
        }
        if new_room is not None:
            response_data['new_room'] = build_room_view(current_app.services, new_room, request.user['id'])
            game_logger.log_game_event(
                new_room.room_id, 'rematch_started', request.remote_addr or 'unknown',
                user_id=request.user['id'], previous_room_id=old_room.room_id,
                run_id=new_run.run_id if new_run else None,
            )
        return success_response('respond_rematch', response_data, old_room.room_id)
    except Exception as e:
        return error_response('respond_rematch', e, room_id)
