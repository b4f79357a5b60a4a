"""
Request lifecycle: create, approve, reject, close and the dashboard listing.

Every status write is a compare-and-swap on the current status, so two
managers racing on the same request cannot both win.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.core.security import Identity
from app.db.base import is_storable_id
from app.models.request import Request, RequestStatus
from app.models.user import User, UserRole
from app.services import lifecycle

logger = logging.getLogger(__name__)


class RequestService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_request(self, request_data: dict, creator_id: int) -> Request:
        """Create a new request in PENDING_APPROVAL, assigned to any existing user."""
        title = (request_data.get("title") or "").strip()
        description = (request_data.get("description") or "").strip()
        if not title or not description:
            raise ValidationError("Title and description are required")

        if not is_storable_id(creator_id) or await self.db.get(User, creator_id) is None:
            raise NotFoundError("User", creator_id)

        assignee_id = request_data.get("assigned_to_id")
        assignee = await self.db.get(User, assignee_id) if is_storable_id(assignee_id) else None
        if assignee is None:
            raise ValidationError("Assignee does not exist", details={"assignedToId": assignee_id})

        request = Request(
            title=title,
            description=description,
            created_by_id=creator_id,
            assigned_to_id=assignee.id,
            status=RequestStatus.PENDING_APPROVAL,
        )
        self.db.add(request)
        await self.db.commit()
        logger.info("Request %s created by user %s for user %s", request.id, creator_id, assignee.id)
        return await self.get_request(request.id)

    async def approve_request(self, request_id: int, approver_id: int) -> Request:
        """Assignee's direct manager approves a pending request."""
        return await self._decide(request_id, approver_id, RequestStatus.APPROVED)

    async def reject_request(self, request_id: int, approver_id: int) -> Request:
        """Assignee's direct manager rejects a pending request."""
        return await self._decide(request_id, approver_id, RequestStatus.REJECTED)

    async def close_request(self, request_id: int, user_id: int) -> Request:
        """
        Assignee closes an approved (or completed) request.
        Raises InvalidStateTransitionError for any other status.
        """
        request = await self._get_or_404(request_id)
        try:
            lifecycle.ensure_can_close(user_id, request)
        except ForbiddenError:
            logger.warning("User %s tried to close request %s assigned to user %s",
                           user_id, request.id, request.assigned_to_id)
            raise
        return await self.update_status(request.id, expected=request.status, target=RequestStatus.CLOSED)

    async def update_status(
        self, request_id: int, expected: RequestStatus, target: RequestStatus
    ) -> Request:
        """
        Move a request from ``expected`` to ``target``.

        Fails with InvalidStateTransitionError if the edge is not in the state
        machine, and with ConflictError if the stored status is no longer
        ``expected`` by the time the write lands.
        """
        expected, target = RequestStatus(expected), RequestStatus(target)
        lifecycle.ensure_transition(expected, target)

        result = await self.db.execute(
            update(Request)
            .where(Request.id == request_id, Request.status == expected)
            .values(status=target)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            logger.warning("Request %s is no longer %s; %s refused", request_id, expected.value, target.value)
            raise ConflictError("Request status changed concurrently")

        await self.db.commit()
        logger.info("Request %s moved %s -> %s", request_id, expected.value, target.value)
        return await self.get_request(request_id)

    async def get_request(self, request_id: int) -> Optional[Request]:
        """Get request by ID with both parties loaded."""
        result = await self.db.execute(
            self._query()
            .where(Request.id == request_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def list_requests(self, identity: Identity) -> Dict[str, List[Request]]:
        """
        Dashboard views for the caller: requests they created, requests
        assigned to them, and (managers only) pending requests whose assignee
        reports directly to them. A self-assigned request shows up in both of
        the first two lists.
        """
        created = await self._fetch(Request.created_by_id == identity.user_id)
        assigned = await self._fetch(Request.assigned_to_id == identity.user_id)

        to_approve: List[Request] = []
        if identity.role == UserRole.MANAGER:
            to_approve = await self._fetch(
                Request.status == RequestStatus.PENDING_APPROVAL,
                Request.assigned_to.has(User.manager_id == identity.user_id),
            )

        return {"created": created, "assigned": assigned, "to_approve": to_approve}

    async def _decide(self, request_id: int, approver_id: int, target: RequestStatus) -> Request:
        request = await self._get_or_404(request_id)
        try:
            lifecycle.ensure_can_decide(approver_id, request.assigned_to)
        except ForbiddenError:
            logger.warning("User %s tried to set request %s to %s without managing user %s",
                           approver_id, request.id, target.value, request.assigned_to_id)
            raise
        return await self.update_status(request.id, expected=request.status, target=target)

    async def _get_or_404(self, request_id: int) -> Request:
        request = await self.get_request(request_id) if is_storable_id(request_id) else None
        if not request:
            raise NotFoundError("Request", request_id)
        return request

    async def _fetch(self, *criteria) -> List[Request]:
        result = await self.db.execute(
            self._query()
            .where(*criteria)
            .order_by(Request.created_at.desc(), Request.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @staticmethod
    def _query():
        return select(Request).options(
            selectinload(Request.created_by),
            selectinload(Request.assigned_to),
        )
