"""
Shared response helpers for the HTTP controllers.
"""

from flask import request, jsonify

from ..services.errors import WordRunError
from ..utils.game_logger import game_logger


def success_response(action: str, data: dict, game_id=None, status_code: int = 200):
    response_data = {'success': True, **data}
    game_logger.log_server_response(request, action, True, response_data, game_id)
    return jsonify(response_data), status_code


def error_response(action: str, error: Exception, game_id=None):
    """
    Turn an exception raised by a service into the JSON error body.

    Domain errors keep their message and status. Anything else is logged
    and reported as a 500.
    """
    if isinstance(error, WordRunError):
        status_code = error.status_code
        message = error.message
        if status_code >= 500:
            game_logger.log_error(request, error, action, game_id)
    else:
        game_logger.log_error(request, error, action, game_id)
        status_code = 500
        message = 'Internal server error'

    body = {'success': False, 'error': message}
    game_logger.log_server_response(request, action, False, body, game_id, status_code=status_code)
    return jsonify(body), status_code


def get_json_body() -> dict:
    return request.get_json(silent=True) or {}
