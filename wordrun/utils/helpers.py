"""
Small helpers shared by the logger, the routes and the services.
"""

import unicodedata
from typing import Dict, Optional


def get_user_identity(request_obj) -> Dict[str, Optional[str]]:
    """Extract user identity information from request."""
    user = getattr(request_obj, 'user', None) or {}
    return {
        'user_ip': getattr(request_obj, 'remote_addr', None) or 'unknown',
        'user_id': user.get('id'),
        'username': user.get('username'),
    }


def normalize_word(value: Optional[str]) -> str:
    """Strip accents and surrounding whitespace, then uppercase ("  Ação " -> "ACAO")."""
    if not value:
        return ""
    decomposed = unicodedata.normalize('NFD', value)
    stripped = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.strip().upper()
