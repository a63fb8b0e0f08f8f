"""Shared fixtures for unit tests: an in-memory database and seed data factories."""

import os
from typing import AsyncGenerator, Awaitable, Callable, Dict

import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlmodel.pool import StaticPool

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Set test configuration before importing the application
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ.setdefault("FOCUSPRINT_ENVIRONMENT", "test")
os.environ.setdefault("LOGFIRE_ENABLED", "false")

from focusprint.core.database.base import Base  # noqa: E402
from focusprint.core.database.entities.admin_profiles import AdminProfile  # noqa: E402
from focusprint.core.database.entities.clients import Client, ClientUser  # noqa: E402
from focusprint.core.database.entities.plans import Plan  # noqa: E402
from focusprint.core.models.domain.enums import AdminRole, PlanType  # noqa: E402
from focusprint.server.services.audit import AuditService  # noqa: E402
from focusprint.server.services.clients import plan_limits  # noqa: E402

PLAN_SEEDS: Dict[str, dict] = {
    "free": {
        "name": "Free",
        "price": 0.0,
        "trial_days": 0,
        "features": {"kanban": True, "chat": True, "reports": False, "api_access": False},
        "limits": {"max_users": 5, "max_projects": 3},
    },
    "pro": {
        "name": "Pro",
        "price": 97.0,
        "trial_days": 14,
        "features": {"kanban": True, "chat": True, "reports": True, "api_access": False},
        "limits": {"max_users": 15, "max_projects": 10},
    },
    "business": {
        "name": "Business",
        "price": 399.0,
        "trial_days": 14,
        "features": {"kanban": True, "chat": True, "reports": True, "api_access": True},
        "limits": {"max_users": 50, "max_projects": 50},
    },
}


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database for each test."""
    import focusprint.core.database.entities  # noqa: F401  registers every table

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    async_session_maker = sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session_maker() as session:  # type: ignore[attr-defined]
        yield session


@pytest_asyncio.fixture
async def audit(session: AsyncSession) -> AuditService:
    return AuditService(session, ip_address="127.0.0.1", user_agent="pytest")


async def _persist(session: AsyncSession, entity):
    session.add(entity)
    await session.commit()
    await session.refresh(entity)
    return entity


@pytest_asyncio.fixture
async def make_admin(session: AsyncSession) -> Callable[..., Awaitable[AdminProfile]]:
    """Factory for admin profiles; the email defaults to one derived from the role."""
    counter = {"n": 0}

    async def _make(role: AdminRole = AdminRole.super_admin, **overrides) -> AdminProfile:
        counter["n"] += 1
        values = {
            "email": f"{role.value}.{counter['n']}@focusprint.test",
            "first_name": role.value.split("_")[0].title(),
            "last_name": "Admin",
            "role": role.value,
        }
        values.update(overrides)
        return await _persist(session, AdminProfile(**values))

    return _make


@pytest_asyncio.fixture
async def super_admin(make_admin) -> AdminProfile:
    return await make_admin(AdminRole.super_admin)


@pytest_asyncio.fixture
async def support_admin(make_admin) -> AdminProfile:
    return await make_admin(AdminRole.support_admin)


@pytest_asyncio.fixture
async def technical_admin(make_admin) -> AdminProfile:
    return await make_admin(AdminRole.technical_admin)


@pytest_asyncio.fixture
async def make_client(session: AsyncSession) -> Callable[..., Awaitable[Client]]:
    """Factory for clients with the usage limits of their plan type."""
    counter = {"n": 0}

    async def _make(plan_type: PlanType = PlanType.free, **overrides) -> Client:
        counter["n"] += 1
        max_users, max_projects = plan_limits(plan_type)
        values = {
            "name": f"Acme {counter['n']}",
            "email": f"contact{counter['n']}@acme.test",
            "plan_type": plan_type.value,
            "max_users": max_users,
            "max_projects": max_projects,
        }
        values.update(overrides)
        return await _persist(session, Client(**values))

    return _make


@pytest_asyncio.fixture
async def make_user(session: AsyncSession) -> Callable[..., Awaitable[ClientUser]]:
    counter = {"n": 0}

    async def _make(client: Client, **overrides) -> ClientUser:
        counter["n"] += 1
        values = {
            "client_id": client.id,
            "email": f"user{counter['n']}@{client.email.split('@')[1]}",
            "first_name": "Maria",
            "last_name": f"Silva {counter['n']}",
        }
        values.update(overrides)
        return await _persist(session, ClientUser(**values))

    return _make


@pytest_asyncio.fixture
async def plans(session: AsyncSession) -> Dict[str, Plan]:
    """The three default plans keyed by code."""
    seeded = {}
    for code, values in PLAN_SEEDS.items():
        seeded[code] = await _persist(session, Plan(code=code, **values))
    return seeded
