"""
Seed database with demo users and requests in every status.
Performs a full clean (DROP ALL) before seeding.
"""
import asyncio
import logging
import os
import sys

# Ensure backend directory is in path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.core.config import settings
from app.core.logging_config import setup_logging
from app.core.security import hash_password
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.models.request import Request, RequestStatus
from app.models.user import User, UserRole

logger = logging.getLogger("seed")

DEMO_PASSWORD = "password123"


async def seed_database():
    logger.info("Resetting database %s", settings.SQLALCHEMY_DATABASE_URI)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    password_hash = hash_password(DEMO_PASSWORD, rounds=settings.BCRYPT_ROUNDS)

    async with SessionLocal() as session:
        emma = User(email="emma@example.com", name="Emma Manager", role=UserRole.MANAGER, password_hash=password_hash)
        david = User(email="david@example.com", name="David Manager", role=UserRole.MANAGER, password_hash=password_hash)
        session.add_all([emma, david])
        await session.flush()

        john = User(email="john@example.com", name="John Employee", role=UserRole.EMPLOYEE,
                    manager_id=emma.id, password_hash=password_hash)
        sarah = User(email="sarah@example.com", name="Sarah Employee", role=UserRole.EMPLOYEE,
                     manager_id=emma.id, password_hash=password_hash)
        mike = User(email="mike@example.com", name="Mike Employee", role=UserRole.EMPLOYEE,
                    manager_id=david.id, password_hash=password_hash)
        session.add_all([john, sarah, mike])
        await session.flush()

        requests = [
            Request(title="Laptop replacement", description="Screen flickers after the last update.",
                    created_by_id=john.id, assigned_to_id=sarah.id, status=RequestStatus.PENDING_APPROVAL),
            Request(title="Quarterly report review", description="Review Q3 numbers before Friday.",
                    created_by_id=sarah.id, assigned_to_id=john.id, status=RequestStatus.APPROVED),
            Request(title="Conference travel", description="Book travel for the October conference.",
                    created_by_id=mike.id, assigned_to_id=john.id, status=RequestStatus.REJECTED),
            Request(title="Office access badge", description="New badge for the second floor.",
                    created_by_id=john.id, assigned_to_id=mike.id, status=RequestStatus.PENDING_APPROVAL),
            Request(title="Onboarding checklist", description="Prepare the checklist for new hires.",
                    created_by_id=emma.id, assigned_to_id=sarah.id, status=RequestStatus.CLOSED),
        ]
        session.add_all(requests)
        await session.commit()

    logger.info("Seeded 5 users and %d requests (password: %s)", len(requests), DEMO_PASSWORD)
    await engine.dispose()


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL)
    asyncio.run(seed_database())
