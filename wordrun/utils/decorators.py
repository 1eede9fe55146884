"""
Authentication Decorators

Bearer-token guards for the HTTP routes and the Socket.IO events. Both
resolve the token through the app's ``AuthService`` and hand the public
user dict to the wrapped function.
"""

from functools import wraps
from typing import Optional, Tuple

from flask import request, jsonify, current_app
from flask_socketio import emit


def bearer_token(header_value: Optional[str]) -> Optional[str]:
    """Token part of an ``Authorization: Bearer <token>`` header."""
    if not header_value:
        return None
    scheme, _, token = header_value.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def _resolve_user(token: Optional[str]) -> Tuple[Optional[dict], Optional[str]]:
    if not token:
        return None, 'Authorization token required'
    result = current_app.services.auth.verify_token(token)
    if not result['success']:
        return None, result['error']
    return result['user'], None


def require_auth(f):
    """Reject the request with 401 unless it carries a valid token; sets ``request.user``."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user, error = _resolve_user(bearer_token(request.headers.get('Authorization')))
        if error:
            return jsonify({'success': False, 'error': error}), 401

        request.user = user
        return f(*args, **kwargs)

    return decorated_function


def websocket_auth_required(f):
    """
    Socket.IO counterpart of ``require_auth``.

    The token travels in the event payload (``{"token": ...}``); the user
    dict is passed to the handler as the ``user`` keyword.
    """
    @wraps(f)
    def decorated_function(data=None, *args, **kwargs):
        token = data.get('token') if isinstance(data, dict) else None
        user, error = _resolve_user(token)
        if error:
            emit('error', {'error': error, 'status_code': 401})
            return None

        kwargs['user'] = user
        return f(data, *args, **kwargs)

    return decorated_function
