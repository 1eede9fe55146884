"""
Game Logger Module

Structured logging for the WordRun server. Every entry is one JSON object
``{timestamp, event_type, action, user, details}`` so the daily log file
can be grepped or loaded line by line.

Service modules log through ``logging.getLogger(__name__)``; those loggers
are children of ``wordrun`` and end up in the same handlers.
"""

import logging
import json
import os
from collections import Counter
from datetime import datetime
from typing import Dict, Any, Optional
from pathlib import Path

from .helpers import get_user_identity

LOGGER_NAME = 'wordrun'

# Never written to the log, whatever the response
SENSITIVE_KEYS = frozenset({'token', 'password', 'password_hash', 'target_word', 'puzzle_word'})

USER_ACTION = 'USER_ACTION'
SERVER_RESPONSE_SUCCESS = 'SERVER_RESPONSE_SUCCESS'
SERVER_RESPONSE_ERROR = 'SERVER_RESPONSE_ERROR'
GAME_EVENT = 'GAME_EVENT'
ERROR = 'ERROR'


class GameLogger:
    """
    JSON logger for requests, responses and run/room transitions.

    A dated file under ``log_dir`` receives everything at ``level`` and
    above; the console only shows warnings and errors.
    """

    def __init__(self, log_dir: str = "logs", level: str = "INFO"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.level = logging.getLevelName(str(level).upper())
        if not isinstance(self.level, int):
            self.level = logging.INFO
        self.logger = self._build_logger()

    def _build_logger(self) -> logging.Logger:
        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(self.level)
        logger.handlers.clear()

        file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
        file_handler.setLevel(self.level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)
        return logger

    @property
    def log_file(self) -> Path:
        return self.log_dir / f"game_log_{datetime.now().strftime('%Y-%m-%d')}.log"

    def _write(self, level: int, event_type: str, action: str,
               user: Dict[str, Any], details: Dict[str, Any]) -> None:
        entry = {
            'timestamp': datetime.now().isoformat(),
            'event_type': event_type,
            'action': action,
            'user': user,
            'details': details,
        }
        self.logger.log(level, json.dumps(entry, ensure_ascii=False, default=str))

    def log_user_action(self, request, action: str, game_id: Optional[str] = None, **kwargs):
        """
        Record an incoming request.

        Args:
            request: Flask request object
            action: What the user asked for ('start_infinite_run', 'join_room'...)
            game_id: Run or room identifier, when known
            **kwargs: Extra request details (guess word, flags)
        """
        details = {
            'game_id': game_id,
            'endpoint': request.endpoint,
            'method': request.method,
            'url': request.url,
            **kwargs,
        }
        self._write(logging.INFO, USER_ACTION, action, get_user_identity(request), details)

    def log_server_response(self, request, action: str, success: bool,
                            response_data: Dict[str, Any], game_id: Optional[str] = None, **kwargs):
        """Record what was answered. Failed responses are logged as warnings."""
        details = {
            'game_id': game_id,
            'success': success,
            'response_size': len(str(response_data)),
            'response_data': self._sanitize_response_data(response_data),
            **kwargs,
        }
        if success:
            self._write(logging.INFO, SERVER_RESPONSE_SUCCESS, action, get_user_identity(request), details)
        else:
            self._write(logging.WARNING, SERVER_RESPONSE_ERROR, action, get_user_identity(request), details)

    def log_game_event(self, game_id: Optional[str], event: str, user_ip: str = 'unknown', **kwargs):
        """
        Record a run or room transition ('word_won', 'failed', 'completed',
        'abandoned', 'rematch_started').

        ``user_id`` and ``username`` keywords go to the user block, the rest
        to the details.
        """
        user = {
            'user_ip': user_ip,
            'user_id': kwargs.pop('user_id', None),
            'username': kwargs.pop('username', None),
        }
        self._write(logging.INFO, GAME_EVENT, event, user, {'game_id': game_id, **kwargs})

    def log_error(self, request, error: Exception, action: str, game_id: Optional[str] = None):
        details = {
            'game_id': game_id,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'action': action,
        }
        self._write(logging.ERROR, ERROR, action, get_user_identity(request), details)

    def _sanitize_response_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Drop secrets and reduce runs and word listings to a summary."""
        if not isinstance(data, dict):
            return {'data_type': type(data).__name__}

        sanitized = {k: v for k, v in data.items() if k not in SENSITIVE_KEYS}

        run = sanitized.get('run')
        if isinstance(run, dict):
            sanitized['run'] = {
                'run_id': run.get('id'),
                'status': run.get('status'),
                'current_score': run.get('current_score'),
                'attempts_used': run.get('attempts_used'),
                'words_completed': run.get('words_completed'),
            }

        if isinstance(sanitized.get('items'), list):
            sanitized['items'] = {'count': len(sanitized['items'])}

        return sanitized

    def get_log_stats(self) -> Dict[str, Any]:
        """Entry counts of today's log file, by event type."""
        log_file = self.log_file
        if not log_file.exists():
            return {'error': 'No log file found for today'}

        counts = Counter()
        try:
            with open(log_file, 'r', encoding='utf-8') as f:
                for line in f:
                    if not line.strip():
                        continue
                    counts['total_entries'] += 1
                    payload = line.split(' | ', 3)[-1]
                    try:
                        event_type = json.loads(payload).get('event_type', 'OTHER')
                    except ValueError:
                        event_type = 'OTHER'
                    counts[event_type] += 1
            size_mb = round(log_file.stat().st_size / (1024 * 1024), 2)
        except OSError as e:
            return {'error': f'Failed to get stats: {e}'}

        return {
            'log_file': str(log_file),
            'file_size_mb': size_mb,
            'total_entries': counts['total_entries'],
            'user_actions': counts[USER_ACTION],
            'server_responses': counts[SERVER_RESPONSE_SUCCESS] + counts[SERVER_RESPONSE_ERROR],
            'game_events': counts[GAME_EVENT],
            'errors': counts[ERROR],
        }


# Global logger instance
game_logger = GameLogger(
    log_dir=os.getenv('LOG_DIR', 'logs'),
    level=os.getenv('LOG_LEVEL', 'INFO'),
)
