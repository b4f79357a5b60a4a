from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from app.core.exceptions import InvalidTokenError
from app.models.user import UserRole


def hash_password(password: str, rounds: int = 10) -> str:
    """Hash a password using bcrypt with a fresh salt."""
    # Bcrypt has a 72 byte limit
    password_bytes = password.encode('utf-8')[:72]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=rounds)).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    password_bytes = plain_password.encode('utf-8')[:72]
    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


@dataclass(frozen=True)
class Identity:
    """Who is calling, as asserted by a verified token."""
    user_id: int
    role: UserRole

    @property
    def is_manager(self) -> bool:
        return self.role == UserRole.MANAGER


class TokenService:
    """
    Issues and verifies signed, time-limited identity tokens.

    The secret is handed in at construction so the API and the tests can each
    choose their own; nothing here reads global settings.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_minutes: int = 60 * 24):
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = timedelta(minutes=expires_minutes)

    def issue(self, user_id: int, role: UserRole, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        claims: Dict[str, Any] = {
            "userId": user_id,
            "role": UserRole(role).value,
            "iat": now,
            "exp": now + (expires_delta if expires_delta is not None else self.expires_delta),
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Identity:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise InvalidTokenError("Token has expired")
        except JWTError:
            raise InvalidTokenError()

        user_id = payload.get("userId")
        role = payload.get("role")
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise InvalidTokenError("Invalid token payload")
        try:
            return Identity(user_id=user_id, role=UserRole(role))
        except ValueError:
            raise InvalidTokenError("Invalid token payload")
