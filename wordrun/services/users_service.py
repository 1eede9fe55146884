"""
Users Service

Player lookups, the infinite-mode progress sink and daily puzzle totals.
"""

import logging
from typing import List, Optional

from ..models.user import User

logger = logging.getLogger(__name__)


class UsersService:

    def __init__(self, user_store):
        self.user_store = user_store

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.user_store.get(user_id)

    def find_by_username(self, username: str) -> Optional[User]:
        return self.user_store.find_by_username(username.strip().lower())

    def update_progress(self, user_id: str, status: str, current_score: int,
                        record: Optional[int] = None) -> Optional[User]:
        """
        Store a player's infinite-mode progress.

        ``record`` is merged as a high-water mark: the stored record only
        ever grows.
        """
        user = self.user_store.update_progress(user_id, status, current_score, record)
        if user is None:
            logger.warning(f"Progress update for unknown user {user_id}")
        return user

    def record_daily_result(self, user_id: str, score: int) -> Optional[User]:
        """Count a finished daily puzzle and add its score to the player's total."""
        user = self.user_store.add_daily_result(user_id, score)
        if user is None:
            logger.warning(f"Daily result for unknown user {user_id}")
        return user

    def list_ranking(self, limit: int = 50) -> List[User]:
        return self.user_store.list_ranking(limit)
