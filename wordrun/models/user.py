"""
User Data Models

Contains user-related data structures.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from .run import utc_now


@dataclass
class User:
    """User data model, including infinite mode progress and daily totals."""
    id: str
    username: str
    password_hash: str = ""
    created_at: datetime = field(default_factory=utc_now)
    last_login: Optional[datetime] = None
    infinite_status: Optional[str] = None
    infinite_current_score: int = 0
    infinite_record: int = 0
    # Daily puzzle totals
    daily_score: int = 0
    daily_streak: int = 0

    def to_document(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "username": self.username,
            "password": self.password_hash,
            "created_at": self.created_at,
            "last_login": self.last_login,
            "infinite_status": self.infinite_status,
            "infinite_current_score": self.infinite_current_score,
            "infinite_record": self.infinite_record,
            "daily_score": self.daily_score,
            "daily_streak": self.daily_streak,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "User":
        return cls(
            id=str(doc["_id"]),
            username=doc["username"],
            password_hash=doc.get("password", ""),
            created_at=doc.get("created_at") or utc_now(),
            last_login=doc.get("last_login"),
            infinite_status=doc.get("infinite_status"),
            infinite_current_score=doc.get("infinite_current_score", 0),
            infinite_record=doc.get("infinite_record", 0),
            daily_score=doc.get("daily_score", 0),
            daily_streak=doc.get("daily_streak", 0),
        )

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "progress": {
                "status": self.infinite_status,
                "current_score": self.infinite_current_score,
                "record": self.infinite_record,
            },
            "daily": {
                "score": self.daily_score,
                "streak": self.daily_streak,
            },
        }
