"""Service-level tests that need direct access to the session."""
import pytest
from sqlalchemy import update

from app.core.exceptions import ConflictError, InvalidStateTransitionError, NotFoundError, ValidationError
from app.core.security import Identity, hash_password
from app.models.request import Request, RequestStatus
from app.models.user import User, UserRole
from app.services.request_service import RequestService


@pytest.fixture
async def people(db_session):
    password_hash = hash_password('password123', rounds=4)
    manager = User(email='boss@example.com', name='Boss', role=UserRole.MANAGER, password_hash=password_hash)
    db_session.add(manager)
    await db_session.flush()
    worker = User(email='worker@example.com', name='Worker', role=UserRole.EMPLOYEE,
                  manager_id=manager.id, password_hash=password_hash)
    db_session.add(worker)
    await db_session.commit()
    return manager, worker


@pytest.fixture
async def pending(db_session, people):
    manager, worker = people
    service = RequestService(db_session)
    return await service.create_request(
        {'title': 'Order toner', 'description': 'Black, two cartridges', 'assigned_to_id': worker.id},
        manager.id,
    )


@pytest.mark.asyncio
async def test_create_loads_both_parties(pending, people):
    manager, worker = people

    assert pending.status == RequestStatus.PENDING_APPROVAL
    assert pending.created_by.email == manager.email
    assert pending.assigned_to.email == worker.email


@pytest.mark.asyncio
async def test_create_strips_and_requires_text(db_session, people):
    manager, worker = people
    service = RequestService(db_session)

    with pytest.raises(ValidationError):
        await service.create_request({'title': '  ', 'description': 'x', 'assigned_to_id': worker.id}, manager.id)

    created = await service.create_request(
        {'title': '  Padded  ', 'description': ' text ', 'assigned_to_id': worker.id}, manager.id
    )
    assert created.title == 'Padded'
    assert created.description == 'text'


@pytest.mark.asyncio
async def test_update_status_refuses_stale_expectation(db_session, pending):
    service = RequestService(db_session)
    # The failed write rolls the session back and expires loaded instances
    pending_id = pending.id
    # Another caller gets there first
    await db_session.execute(
        update(Request).where(Request.id == pending_id).values(status=RequestStatus.REJECTED)
    )
    await db_session.commit()

    with pytest.raises(ConflictError):
        await service.update_status(pending_id, expected=RequestStatus.PENDING_APPROVAL, target=RequestStatus.APPROVED)

    current = await service.get_request(pending_id)
    assert current.status == RequestStatus.REJECTED


@pytest.mark.asyncio
async def test_update_status_checks_state_machine_first(db_session, pending):
    service = RequestService(db_session)

    with pytest.raises(InvalidStateTransitionError):
        await service.update_status(pending.id, expected=RequestStatus.PENDING_APPROVAL, target=RequestStatus.CLOSED)

    assert (await service.get_request(pending.id)).status == RequestStatus.PENDING_APPROVAL


@pytest.mark.asyncio
async def test_update_status_refreshes_updated_at(db_session, pending):
    service = RequestService(db_session)

    approved = await service.update_status(
        pending.id, expected=RequestStatus.PENDING_APPROVAL, target=RequestStatus.APPROVED
    )

    assert approved.status == RequestStatus.APPROVED
    assert approved.updated_at is not None


@pytest.mark.asyncio
async def test_approve_missing_request(db_session, people):
    manager, _ = people

    with pytest.raises(NotFoundError):
        await RequestService(db_session).approve_request(999, manager.id)


@pytest.mark.asyncio
async def test_list_requests_for_manager(db_session, people, pending):
    manager, worker = people
    service = RequestService(db_session)

    manager_view = await service.list_requests(Identity(user_id=manager.id, role=UserRole.MANAGER))
    worker_view = await service.list_requests(Identity(user_id=worker.id, role=UserRole.EMPLOYEE))

    assert [r.id for r in manager_view['created']] == [pending.id]
    assert [r.id for r in manager_view['to_approve']] == [pending.id]
    assert manager_view['assigned'] == []
    assert [r.id for r in worker_view['assigned']] == [pending.id]
    assert worker_view['to_approve'] == []


@pytest.mark.asyncio
async def test_role_in_token_gates_to_approve(db_session, people, pending):
    # A manager token is what unlocks the approval queue, not the data alone
    manager, _ = people
    view = await RequestService(db_session).list_requests(Identity(user_id=manager.id, role=UserRole.EMPLOYEE))

    assert view['to_approve'] == []


@pytest.mark.asyncio
async def test_create_for_unknown_creator(db_session, people):
    _, worker = people

    with pytest.raises(NotFoundError):
        await RequestService(db_session).create_request(
            {'title': 'Ghost', 'description': 'From a deleted account', 'assigned_to_id': worker.id}, 9999
        )


@pytest.mark.asyncio
async def test_out_of_range_ids_never_reach_the_database(db_session, people):
    manager, worker = people
    service = RequestService(db_session)

    with pytest.raises(NotFoundError):
        await service.approve_request(2**70, manager.id)
    with pytest.raises(ValidationError):
        await service.create_request({'title': 't', 'description': 'd', 'assigned_to_id': 2**70}, manager.id)
