from typing import Annotated, Any
from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.api import deps
from app.core.security import TokenService
from app.db.session import get_db
from app.schemas.auth import LoginRequest, Registration
from app.schemas.user import AuthResponse
from app.services.auth_service import AuthService

router = APIRouter()

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    registration: Annotated[Registration, Body(discriminator="role")],
    db: AsyncSession = Depends(get_db),
    token_service: TokenService = Depends(deps.get_token_service),
) -> Any:
    """Register an employee (optionally with a manager) or a manager."""
    service = AuthService(db, token_service)
    return await service.register(registration)

@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
    token_service: TokenService = Depends(deps.get_token_service),
) -> Any:
    service = AuthService(db, token_service)
    return await service.login(credentials.email, credentials.password)
