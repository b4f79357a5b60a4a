from typing import Any, List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.api import deps
from app.core.exceptions import NotFoundError
from app.core.security import Identity
from app.db.session import get_db
from app.schemas.user import UserPublic
from app.services.user_service import UserService

router = APIRouter()

@router.get("", response_model=List[UserPublic])
async def read_users(
    identity: Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Everyone who can be picked as an assignee."""
    return await UserService(db).list_users()

@router.get("/employees", response_model=List[UserPublic])
async def read_employees(
    identity: Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await UserService(db).list_employees()

@router.get("/managers", response_model=List[UserPublic])
async def read_managers(
    identity: Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await UserService(db).list_managers()

@router.get("/me", response_model=UserPublic)
async def read_me(
    identity: Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> Any:
    user = await UserService(db).get_user(identity.user_id)
    if not user:
        raise NotFoundError("User", identity.user_id)
    return user
