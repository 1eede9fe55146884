"""
Service Errors

Every rule violation raised by the services carries an HTTP-ready status
code; controllers turn them into ``{'success': False, 'error': ...}``.
"""


class WordRunError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(WordRunError):
    """No active run or room for this actor."""
    status_code = 404


class InvalidInputError(WordRunError):
    """Malformed guess: wrong length, bad characters, unknown word."""
    status_code = 400


class ConflictError(WordRunError):
    """Duplicate guess, finished game, unavailable room or a lost write race."""
    status_code = 409


class ForbiddenError(WordRunError):
    """Out-of-turn guess or an actor that does not belong to the room."""
    status_code = 403


class StateCorruptionError(WordRunError):
    """Stored game state is inconsistent (e.g. an active run without a target)."""
    status_code = 500


class LengthMismatchError(ValueError):
    """Guess and target have different lengths."""
