"""Shared fixtures: an in-memory SQLite database and stores bound to it."""

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from routemaker.server.auth.authorization import MembershipAuthority
from routemaker.server.auth.user_auth import UserIdentity
from routemaker.storage.base import Base
from routemaker.storage.org import Org
from routemaker.storage.org_invitation_store import OrgInvitationStore
from routemaker.storage.org_member import OrgMember
from routemaker.storage.org_member_store import OrgMemberStore
from routemaker.storage.org_store import OrgStore


@pytest.fixture
async def async_engine():
    """Create an async SQLite engine for testing."""
    engine = create_async_engine(
        'sqlite+aiosqlite:///:memory:',
        poolclass=StaticPool,
        connect_args={'check_same_thread': False},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(async_engine):
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def org_store(session_maker):
    return OrgStore(session_maker)


@pytest.fixture
def member_store(session_maker):
    return OrgMemberStore(session_maker)


@pytest.fixture
def invitation_store(session_maker):
    return OrgInvitationStore(session_maker)


@pytest.fixture
def authority(member_store):
    return MembershipAuthority(member_store)


@pytest.fixture
def add_member(session_maker):
    """Insert a membership directly, bypassing the invitation flow."""

    async def _add(org: Org, role: str, email: str | None = None) -> OrgMember:
        async with session_maker() as session:
            member = OrgMember(
                organization_id=org.id, user_id=uuid4(), email=email, role=role
            )
            session.add(member)
            await session.commit()
            await session.refresh(member)
            return member

    return _add


@pytest.fixture
async def acme(org_store):
    """Organization "Acme" owned by alice@x.com."""
    owner = UserIdentity(user_id=uuid4(), email='alice@x.com')
    org = await org_store.create_org_with_owner(
        'Acme', 'acme', owner.user_id, owner.email
    )
    return org, owner
