"""Pytest fixtures for testing.

Tests run against in-memory SQLite by default. Point ``TEST_DATABASE_URL``
at a PostgreSQL database to run against the production engine, which also
enables the concurrency tests that need real row locks.
"""

import os
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from uuid import UUID, uuid4

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-long-enough-0123")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from tenancy.core.database import build_engine, get_db
from tenancy.core.security import create_access_token
from tenancy.main import app
from tenancy.models.base import Base
from tenancy.models.enums import OrganizationRole
from tenancy.models.membership import Membership
from tenancy.services.membership_service import MembershipService
from tenancy.services.membership_store import MembershipStore
from tenancy.services.org_service import OrganizationService

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
IS_POSTGRES = TEST_DATABASE_URL.startswith("postgresql")

# Create test engine
if IS_POSTGRES:
    test_engine = build_engine(TEST_DATABASE_URL, poolclass=NullPool)
else:
    test_engine = build_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

# Create test session factory
TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

requires_postgres = pytest.mark.skipif(
    not IS_POSTGRES,
    reason="needs TEST_DATABASE_URL pointing at PostgreSQL for row locks",
)


@pytest_asyncio.fixture(scope="function")
async def db() -> AsyncGenerator[AsyncSession, None]:
    """Create test database session.

    Creates all tables before each test and drops them after.
    Drops everything first to ensure clean slate even if previous test crashed.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    # Connections are bound to the test's event loop
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database dependency override.

    Args:
        db: Test database session

    Yields:
        AsyncClient configured for testing
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield db
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def auth_headers(principal_id: UUID) -> dict[str, str]:
    """Bearer headers for a principal, as the identity provider would issue."""
    token = create_access_token({"sub": str(principal_id)})
    return {"Authorization": f"Bearer {token}"}


async def register_principal(db: AsyncSession, display_name: str | None = None) -> UUID:
    """Principal factory: a fresh identity with a profile row.

    Args:
        db: Database session
        display_name: Optional profile display name

    Returns:
        The new principal id
    """
    principal_id = uuid4()
    values = {"display_name": display_name} if display_name else {}
    await MembershipStore(db).upsert_profile(principal_id, **values)
    await db.commit()
    return principal_id


@dataclass
class OrgFixture:
    """Ids of a seeded organization and its members.

    Only ids are kept: a rolled back mutation expires loaded instances.
    """

    org_id: UUID
    slug: str
    owner_id: UUID
    admin_id: UUID
    member_id: UUID
    owner_membership_id: UUID
    admin_membership_id: UUID
    member_membership_id: UUID


@pytest_asyncio.fixture
async def outsider(db: AsyncSession) -> UUID:
    """A registered principal with no memberships."""
    return await register_principal(db, "Olivia Outsider")


@pytest_asyncio.fixture
async def acme(db: AsyncSession) -> OrgFixture:
    """Organization "acme" with one owner, one admin and one member.

    Args:
        db: Database session

    Returns:
        OrgFixture with the ids of everything created
    """
    owner_id = await register_principal(db, "Alice Owner")
    admin_id = await register_principal(db, "Adam Admin")
    member_id = await register_principal(db, "Mia Member")

    org = await OrganizationService(db).create(owner_id, "Acme Inc", "acme")
    org_id = org.id

    memberships = MembershipService(db)
    admin_membership = await memberships.add_member(
        owner_id, org_id, admin_id, OrganizationRole.ADMIN
    )
    member_membership = await memberships.add_member(
        owner_id, org_id, member_id, OrganizationRole.MEMBER
    )
    owner_membership = await MembershipStore(db).get_membership_for(org_id, owner_id)

    return OrgFixture(
        org_id=org_id,
        slug="acme",
        owner_id=owner_id,
        admin_id=admin_id,
        member_id=member_id,
        owner_membership_id=owner_membership.id,
        admin_membership_id=admin_membership.id,
        member_membership_id=member_membership.id,
    )


async def organizations_without_owner(db: AsyncSession) -> list[UUID]:
    """Ids of organizations that still have members but no owner."""
    result = await db.execute(select(Membership.organization_id, Membership.role))
    roles_by_org: dict[UUID, set[OrganizationRole]] = {}
    for org_id, role in result.all():
        roles_by_org.setdefault(org_id, set()).add(role)
    return [
        org_id for org_id, roles in roles_by_org.items()
        if OrganizationRole.OWNER not in roles
    ]


async def member_count(db: AsyncSession, org_id: UUID) -> int:
    result = await db.execute(
        select(func.count(Membership.id)).where(Membership.organization_id == org_id)
    )
    return result.scalar_one()
