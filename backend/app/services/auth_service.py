"""
Registration and login.
"""
import logging
from functools import lru_cache
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.config import settings
from app.core.exceptions import EmailAlreadyRegisteredError, InvalidCredentialsError, ValidationError
from app.core.security import TokenService, hash_password, verify_password
from app.db.base import is_storable_id
from app.models.user import User, UserRole
from app.schemas.auth import Registration

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> str:
    # Compared against when the email is unknown so both failures cost the same
    return hash_password("request-desk-dummy-password", rounds=rounds)


class AuthService:
    def __init__(
        self,
        db: AsyncSession,
        token_service: TokenService,
        bcrypt_rounds: int = settings.BCRYPT_ROUNDS,
        password_min_length: int = settings.PASSWORD_MIN_LENGTH,
    ):
        self.db = db
        self.token_service = token_service
        self.bcrypt_rounds = bcrypt_rounds
        self.password_min_length = password_min_length

    async def register(self, registration: Registration) -> Dict[str, Any]:
        """
        Create a user and sign them in.
        Returns ``{"token": ..., "user": User}``.
        """
        if len(registration.password) < self.password_min_length:
            raise ValidationError(
                f"Password must be at least {self.password_min_length} characters",
                details={"field": "password"},
            )

        email = registration.email.lower()
        role = UserRole(registration.role)
        manager_id = getattr(registration, "manager_id", None)

        if manager_id is not None:
            manager = await self.db.get(User, manager_id) if is_storable_id(manager_id) else None
            if manager is None or manager.role != UserRole.MANAGER:
                raise ValidationError("managerId must reference a manager", details={"field": "managerId"})

        if await self._get_by_email(email):
            logger.info("Registration refused: %s already registered", email)
            raise EmailAlreadyRegisteredError()

        user = User(
            email=email,
            password_hash=hash_password(registration.password, rounds=self.bcrypt_rounds),
            name=registration.name,
            role=role,
            manager_id=manager_id,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            await self.db.rollback()
            raise EmailAlreadyRegisteredError()
        await self.db.refresh(user)

        logger.info("Registered user %s (%s)", user.id, user.role.value)
        return {"token": self.token_service.issue(user.id, user.role), "user": user}

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        user = await self._get_by_email(email.lower())
        if user is None:
            verify_password(password, _dummy_hash(self.bcrypt_rounds))
            logger.info("Login failed")
            raise InvalidCredentialsError()
        if not verify_password(password, user.password_hash):
            logger.info("Login failed")
            raise InvalidCredentialsError()

        logger.info("User %s logged in", user.id)
        return {"token": self.token_service.issue(user.id, user.role), "user": user}

    async def _get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()
