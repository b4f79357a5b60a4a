from typing import Any
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.api import deps
from app.core.security import Identity
from app.db.session import get_db
from app.schemas.request import RequestCreate, RequestListResponse, RequestResponse
from app.services.request_service import RequestService

router = APIRouter()

@router.get("", response_model=RequestListResponse)
async def read_requests(
    identity: Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Requests I created, requests assigned to me, and (managers) requests waiting on me."""
    service = RequestService(db)
    return await service.list_requests(identity)

@router.post("", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
async def create_request(
    request_in: RequestCreate,
    identity: Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> Any:
    service = RequestService(db)
    return await service.create_request(request_in.model_dump(), identity.user_id)

@router.put("/{request_id}/approve", response_model=RequestResponse)
async def approve_request(
    request_id: int,
    identity: Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> Any:
    service = RequestService(db)
    return await service.approve_request(request_id, identity.user_id)

@router.put("/{request_id}/reject", response_model=RequestResponse)
async def reject_request(
    request_id: int,
    identity: Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> Any:
    service = RequestService(db)
    return await service.reject_request(request_id, identity.user_id)

@router.put("/{request_id}/close", response_model=RequestResponse)
async def close_request(
    request_id: int,
    identity: Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Assignee closes an approved request."""
    service = RequestService(db)
    return await service.close_request(request_id, identity.user_id)
