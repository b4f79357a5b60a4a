from datetime import datetime
from typing import List, Optional
from app.models.request import RequestStatus
from app.schemas.auth import NonEmptyStr
from app.schemas.user import CamelModel, EntityId, UserSummary


class RequestCreate(CamelModel):
    title: NonEmptyStr
    description: NonEmptyStr
    assigned_to_id: EntityId


class RequestResponse(CamelModel):
    id: int
    title: str
    description: str
    status: RequestStatus
    created_by_id: int
    assigned_to_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[UserSummary] = None
    assigned_to: Optional[UserSummary] = None


class RequestListResponse(CamelModel):
    created: List[RequestResponse]
    assigned: List[RequestResponse]
    to_approve: List[RequestResponse]
