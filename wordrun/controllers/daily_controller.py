"""
Daily Puzzle Controller

The shared puzzle of the day and the caller's history of daily plays.
"""

from flask import Blueprint, request, current_app
from ..utils.decorators import require_auth
from ..utils.game_logger import game_logger
from .responses import error_response, get_json_body, success_response

daily_bp = Blueprint('daily', __name__)


@daily_bp.route('/puzzles/daily', methods=['GET'])
@require_auth
def get_daily_status():
    """Caller's progress on today's puzzle (or the one of ``?date=YYYY-MM-DD``)."""
    try:
        result = current_app.services.daily.get_daily_status(request.user['id'], request.args.get('date'))
        return success_response('get_daily_status', result.to_dict(), result.puzzle.daily_id)
    except Exception as e:
        return error_response('get_daily_status', e)


@daily_bp.route('/puzzles/daily/guess', methods=['POST'])
@require_auth
def submit_daily_guess():
    daily_id = None
    try:
        data = get_json_body()
        guess = data.get('guess', data.get('guess_word'))
        game_logger.log_user_action(request, 'submit_daily_guess', guess=guess, date=data.get('date'))

        result = current_app.services.daily.submit_daily_guess(request.user['id'], guess, data.get('date'))
        daily_id = result.puzzle.daily_id
        if result.status.is_finished:
            game_logger.log_game_event(
                daily_id,
                f"daily_{result.status.value}",
                request.remote_addr or 'unknown',
                user_id=request.user['id'],
                username=request.user['username'],
                attempts_used=result.entry.attempts_used,
                score=result.entry.score,
            )
        return success_response('submit_daily_guess', result.to_dict(), daily_id)
    except Exception as e:
        return error_response('submit_daily_guess', e, daily_id)


@daily_bp.route('/history', methods=['GET'])
@require_auth
def daily_history():
    try:
        page = request.args.get('page', default=1, type=int)
        page_size = request.args.get('page_size', default=10, type=int)
        history = current_app.services.daily.paginate_history(request.user['id'], page, page_size)
        return success_response('daily_history', history)
    except Exception as e:
        return error_response('daily_history', e)
