"""
Authentication Controller

Account registration, login and token verification.
"""

from flask import Blueprint, request, jsonify, current_app
from ..services.errors import InvalidInputError
from ..utils.decorators import require_auth
from ..utils.game_logger import game_logger
from .responses import error_response, get_json_body

auth_bp = Blueprint('auth', __name__)

# AuthService result errors that are not plain input problems
_ERROR_STATUS = {
    'Username already exists': 409,
    'Invalid username or password': 401,
}


def _credentials(action):
    data = get_json_body()
    if not data:
        raise InvalidInputError('Request body is required')
    username = data.get('username')
    game_logger.log_user_action(request, action, extra_data={'username': username})
    return username, data.get('password')


def _auth_result_response(action, result, success_status=200):
    """Answer an AuthService result dict, choosing the status from its error."""
    game_logger.log_server_response(request, action, result['success'], result)
    if result['success']:
        return jsonify(result), success_status
    return jsonify(result), _ERROR_STATUS.get(result['error'], 400)


@auth_bp.route('/register', methods=['POST'])
def register():
    try:
        username, password = _credentials('register')
        result = current_app.services.auth.register_user(username, password)
        return _auth_result_response('register', result, success_status=201)
    except Exception as e:
        return error_response('register', e)


@auth_bp.route('/login', methods=['POST'])
def login():
    """Login a user and return a JWT token with the public user data."""
    try:
        username, password = _credentials('login')
        result = current_app.services.auth.login_user(username, password)
        return _auth_result_response('login', result)
    except Exception as e:
        return error_response('login', e)


@auth_bp.route('/verify', methods=['GET'])
@require_auth
def verify_token():
    # require_auth already resolved the user
    response_data = {'success': True, 'user': request.user}
    game_logger.log_server_response(request, 'verify_token', True, response_data)
    return jsonify(response_data)
