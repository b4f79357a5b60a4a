from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.db.base import is_storable_id
from app.models.user import User, UserRole


class UserService:
    """Read-only directory queries used to fill assignee and manager pickers."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_users(self, role: Optional[UserRole] = None) -> List[User]:
        query = select(User).order_by(User.name, User.id)
        if role is not None:
            query = query.where(User.role == role)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_managers(self) -> List[User]:
        return await self.list_users(UserRole.MANAGER)

    async def list_employees(self) -> List[User]:
        return await self.list_users(UserRole.EMPLOYEE)

    async def get_user(self, user_id: int) -> Optional[User]:
        if not is_storable_id(user_id):
            return None
        return await self.db.get(User, user_id)
