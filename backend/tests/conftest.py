"""
Request Desk - test configuration and fixtures
"""
import os
from typing import AsyncGenerator, Optional

import pytest
from faker import Faker
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

# Set testing environment before the app reads its settings
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['SQLALCHEMY_DATABASE_URI'] = 'sqlite+aiosqlite:///./unused-test.db'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['CREATE_TABLES_ON_STARTUP'] = 'false'

from main import app
from app.api.deps import get_token_service
from app.core.security import TokenService
from app.db.base import Base
from app.db.session import get_db

fake = Faker()

TEST_SECRET = 'deterministic-test-secret'
DEFAULT_PASSWORD = 'password123'


@pytest.fixture
async def db_session(tmp_path) -> AsyncGenerator[AsyncSession, None]:
    """Fresh SQLite database and session for each test"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TEST_SECRET, expires_minutes=60)


@pytest.fixture
async def client(db_session: AsyncSession, token_service: TokenService) -> AsyncGenerator[AsyncClient, None]:
    """Test client with database and token service overridden"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_service] = lambda: token_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


def auth_headers(token: str) -> dict:
    return {'Authorization': f'Bearer {token}'}


async def register_user(
    client: AsyncClient,
    role: str = 'EMPLOYEE',
    manager_id: Optional[int] = None,
    email: Optional[str] = None,
    password: str = DEFAULT_PASSWORD,
) -> dict:
    """Register through the API; returns ``{token, user, headers}``."""
    payload = {
        'email': email or f"{fake.unique.user_name()}@example.com",
        'password': password,
        'name': fake.name(),
        'role': role,
    }
    if manager_id is not None:
        payload['managerId'] = manager_id

    response = await client.post('/api/auth/register', json=payload)
    assert response.status_code == 201, response.text
    data = response.json()
    data['headers'] = auth_headers(data['token'])
    data['password'] = password
    return data


@pytest.fixture
async def team(client: AsyncClient) -> dict:
    """
    Manager ``a`` with reports ``b`` and ``c``; manager ``m`` with report ``d``.
    """
    a = await register_user(client, 'MANAGER')
    b = await register_user(client, 'EMPLOYEE', manager_id=a['user']['id'])
    c = await register_user(client, 'EMPLOYEE', manager_id=a['user']['id'])
    m = await register_user(client, 'MANAGER')
    d = await register_user(client, 'EMPLOYEE', manager_id=m['user']['id'])
    return {'a': a, 'b': b, 'c': c, 'm': m, 'd': d}


async def create_request(client: AsyncClient, creator: dict, assignee: dict, title: str = 'Fix printer') -> dict:
    response = await client.post(
        '/api/requests',
        json={'title': title, 'description': 'Paper jams on tray 2', 'assignedToId': assignee['user']['id']},
        headers=creator['headers'],
    )
    assert response.status_code == 201, response.text
    return response.json()
