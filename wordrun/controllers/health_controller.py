"""
Health Controller
"""

from flask import Blueprint, request, jsonify, current_app
from ..utils.game_logger import game_logger

health_bp = Blueprint('health', __name__)


@health_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    try:
        services = current_app.services
        registry = current_app.room_registry
        watched = set(registry.watched_rooms())
        game_logger.log_user_action(request, 'health_check')

        response_data = {
            'status': 'healthy',
            'storage': 'mongodb' if services.stores.client is not None else 'memory',
            'total_words': services.solo_runs.total_words(),
            'watched_rooms': len(watched),
            'room_watchers': sum(len(registry.watchers(room_id)) for room_id in watched),
            'log_stats': game_logger.get_log_stats(),
        }

        game_logger.log_server_response(request, 'health_check', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'health_check')
        error_response = {
            'status': 'error',
            'error': str(e)
        }
        game_logger.log_server_response(request, 'health_check', False, error_response)
        return jsonify(error_response), 500
