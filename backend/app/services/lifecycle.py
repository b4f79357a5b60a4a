"""
Request status state machine and approval policy.

Nothing in here touches the database: callers load the request and its
assignee, then ask this module whether the caller may act and whether the
status may move.

    PENDING_APPROVAL -> APPROVED | REJECTED
    APPROVED         -> COMPLETED | CLOSED
    COMPLETED        -> CLOSED
    REJECTED, CLOSED    terminal

No API operation moves a request into COMPLETED yet. The edge is kept so a
completion-reporting endpoint can be added without touching close rules.
"""
from typing import Any, Dict, FrozenSet, Optional

from app.core.exceptions import ForbiddenError, InvalidStateTransitionError
from app.models.request import RequestStatus

ALLOWED_TRANSITIONS: Dict[RequestStatus, FrozenSet[RequestStatus]] = {
    RequestStatus.PENDING_APPROVAL: frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED}),
    RequestStatus.APPROVED: frozenset({RequestStatus.COMPLETED, RequestStatus.CLOSED}),
    RequestStatus.COMPLETED: frozenset({RequestStatus.CLOSED}),
    RequestStatus.REJECTED: frozenset(),
    RequestStatus.CLOSED: frozenset(),
}

TERMINAL_STATUSES: FrozenSet[RequestStatus] = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

_TRANSITION_ERRORS = {
    RequestStatus.APPROVED: "Request must be pending approval to approve",
    RequestStatus.REJECTED: "Request must be pending approval to reject",
    RequestStatus.COMPLETED: "Request must be approved before completing",
    RequestStatus.CLOSED: "Request must be approved before closing",
}


def can_transition(current: RequestStatus, target: RequestStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(RequestStatus(current), frozenset())


def is_terminal(status: RequestStatus) -> bool:
    return RequestStatus(status) in TERMINAL_STATUSES


def ensure_transition(current: RequestStatus, target: RequestStatus) -> None:
    """Raise InvalidStateTransitionError unless ``current -> target`` is allowed."""
    current = RequestStatus(current)
    target = RequestStatus(target)
    if not can_transition(current, target):
        raise InvalidStateTransitionError(
            _TRANSITION_ERRORS.get(target, f"Cannot move request from {current.value} to {target.value}"),
            current_status=current.value,
            target_status=target.value,
        )


def is_manager_of(caller_id: int, assignee: Optional[Any]) -> bool:
    """
    True when ``caller_id`` is the direct manager of ``assignee``.

    ``assignee`` is anything with a ``manager_id`` attribute (an ORM ``User``
    or a plain stand-in), so the rule can be checked without a session.
    """
    if assignee is None:
        return False
    manager_id = getattr(assignee, "manager_id", None)
    return manager_id is not None and manager_id == caller_id


def ensure_can_decide(caller_id: int, assignee: Optional[Any]) -> None:
    """Approve/reject gate: only the assignee's direct manager may decide."""
    if not is_manager_of(caller_id, assignee):
        raise ForbiddenError("Only the assignee's manager can approve or reject this request")


def ensure_can_close(caller_id: int, request: Any) -> None:
    if request.assigned_to_id != caller_id:
        raise ForbiddenError("Only the assignee can close this request")
