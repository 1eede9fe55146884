"""
Infinite Mode Controller

HTTP endpoints of the single-player endless run, the word list and the
ranking.
"""

from flask import Blueprint, request, current_app
from ..services.run_engine import OUTCOME_CONTINUE, OUTCOME_UNCHANGED
from ..utils.decorators import require_auth
from ..utils.game_logger import game_logger
from .responses import error_response, get_json_body, success_response

infinite_bp = Blueprint('infinite', __name__)


def _log_transition(result, user):
    """Record terminal and scoring transitions as game events."""
    if result.outcome in (OUTCOME_CONTINUE, OUTCOME_UNCHANGED):
        return
    game_logger.log_game_event(
        result.run.run_id,
        result.outcome,
        request.remote_addr or 'unknown',
        user_id=user['id'],
        username=user['username'],
        current_score=result.run.current_score,
        final_score=result.final_score,
        word=result.finished_word.word if result.finished_word else None,
    )


@infinite_bp.route('/start', methods=['POST'])
@require_auth
def start_run():
    """Start (or resume) the caller's infinite run."""
    try:
        game_logger.log_user_action(request, 'start_infinite_run')
        result = current_app.services.solo_runs.start_run(request.user['id'])
        return success_response('start_infinite_run', result.to_dict(), result.run.run_id)
    except Exception as e:
        return error_response('start_infinite_run', e)


@infinite_bp.route('/run', methods=['GET'])
@require_auth
def get_run():
    try:
        result = current_app.services.solo_runs.get_run(request.user['id'])
        return success_response('get_infinite_run', result.to_dict(), result.run.run_id)
    except Exception as e:
        return error_response('get_infinite_run', e)


@infinite_bp.route('/guess', methods=['POST'])
@require_auth
def submit_guess():
    """Submit a guess for the current word of the caller's run."""
    try:
        data = get_json_body()
        guess = data.get('guess', data.get('guess_word'))

        game_logger.log_user_action(request, 'submit_infinite_guess', guess=guess)

        result = current_app.services.solo_runs.submit_guess(request.user['id'], guess)
        _log_transition(result, request.user)
        return success_response('submit_infinite_guess', result.to_dict(), result.run.run_id)
    except Exception as e:
        return error_response('submit_infinite_guess', e)


@infinite_bp.route('/abandon', methods=['POST'])
@require_auth
def abandon_run():
    try:
        game_logger.log_user_action(request, 'abandon_infinite_run')
        result = current_app.services.solo_runs.abandon_run(request.user['id'])
        _log_transition(result, request.user)
        return success_response('abandon_infinite_run', result.to_dict(), result.run.run_id)
    except Exception as e:
        return error_response('abandon_infinite_run', e)


@infinite_bp.route('/words', methods=['GET'])
@require_auth
def list_words():
    """Paginated listing of the word pool."""
    try:
        page = request.args.get('page', default=1, type=int)
        page_size = request.args.get('page_size', default=100, type=int)
        listing = current_app.services.word_pool.list_words(page, page_size)
        return success_response('list_words', listing)
    except Exception as e:
        return error_response('list_words', e)


@infinite_bp.route('/ranking', methods=['GET'])
@require_auth
def ranking():
    try:
        limit = request.args.get('limit', default=50, type=int)
        users = current_app.services.users.list_ranking(max(1, min(limit, 100)))
        entries = [
            {
                'position': index,
                'username': user.username,
                'record': user.infinite_record,
                'status': user.infinite_status,
            }
            for index, user in enumerate(users, start=1)
        ]
        return success_response('ranking', {'ranking': entries})
    except Exception as e:
        return error_response('ranking', e)
