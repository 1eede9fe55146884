"""
Authentication Service

Accounts live in the user store; passwords are bcrypt hashes and sessions
are stateless HS256 JWTs carrying the user id. Every public method answers
a result dict (``{"success": bool, ...}``) the auth routes send as-is.
"""

import datetime
import logging
from typing import Any, Dict, Optional

import bcrypt
import jwt

from ..models.user import User
from .errors import ConflictError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


def _failure(message: str) -> Dict[str, Any]:
    return {"success": False, "error": message}


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _canonical_username(username: str) -> str:
    return username.strip().lower()


class AuthService:
    """Registration, login and bearer token checks."""

    def __init__(self, user_store, jwt_secret: str, jwt_expiration_days: int = 7):
        self.user_store = user_store
        self.jwt_secret = jwt_secret
        self.token_lifetime = datetime.timedelta(days=jwt_expiration_days)

    @staticmethod
    def hash_password(password: str) -> str:
        return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

    @staticmethod
    def verify_password(password: str, hashed_password: str) -> bool:
        return bcrypt.checkpw(password.encode('utf-8'), hashed_password.encode('utf-8'))

    @staticmethod
    def _registration_problem(username: Optional[str], password: Optional[str]) -> Optional[str]:
        if not username or not password:
            return "Username and password are required"
        if len(username.strip()) < MIN_USERNAME_LENGTH:
            return f"Username must be at least {MIN_USERNAME_LENGTH} characters long"
        if len(password) < MIN_PASSWORD_LENGTH:
            return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        return None

    def register_user(self, username: str, password: str) -> Dict[str, Any]:
        """
        Create an account. Usernames are stored trimmed and lowercased, so
        "Alice" and "alice " are the same account.

        Returns ``{"success": True, "message", "user_id"}`` or a failure dict.
        """
        problem = self._registration_problem(username, password)
        if problem:
            return _failure(problem)

        username = _canonical_username(username)
        if self.user_store.find_by_username(username):
            return _failure("Username already exists")

        user = User(
            id=self.user_store.new_id(),
            username=username,
            password_hash=self.hash_password(password),
        )
        try:
            self.user_store.insert(user)
        except ConflictError as e:
            # Lost a race against a concurrent registration
            return _failure(e.message)

        logger.info("Registered user %s (%s)", username, user.id)
        return {"success": True, "message": "User registered successfully", "user_id": user.id}

    def login_user(self, username: str, password: str) -> Dict[str, Any]:
        """Check the credentials, stamp ``last_login`` and issue a token."""
        if not username or not password:
            return _failure("Username and password are required")

        user = self.user_store.find_by_username(_canonical_username(username))
        if user is None or not self.verify_password(password, user.password_hash):
            return _failure("Invalid username or password")

        issued_at = _utcnow()
        self.user_store.set_last_login(user.id, issued_at)
        logger.info("User %s logged in", user.username)
        return {
            "success": True,
            "token": self.create_token(user, issued_at),
            "user": user.to_public_dict(),
        }

    def create_token(self, user: User, issued_at: Optional[datetime.datetime] = None) -> str:
        issued_at = issued_at or _utcnow()
        claims = {
            "user_id": user.id,
            "username": user.username,
            "exp": issued_at + self.token_lifetime,
        }
        return jwt.encode(claims, self.jwt_secret, algorithm=JWT_ALGORITHM)

    def verify_token(self, token: str) -> Dict[str, Any]:
        """Resolve a token to ``{"success": True, "user": <public user dict>}``."""
        if not token:
            return _failure("Token is required")

        try:
            claims = jwt.decode(token, self.jwt_secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            return _failure("Token has expired")
        except jwt.InvalidTokenError:
            return _failure("Invalid token")

        user_id = claims.get("user_id")
        if not user_id:
            return _failure("Invalid token payload")

        user = self.user_store.get(user_id)
        if user is None:
            return _failure("User not found")
        return {"success": True, "user": user.to_public_dict()}
