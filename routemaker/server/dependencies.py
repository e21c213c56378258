"""
FastAPI dependency providers for stores and services.

Every provider takes its collaborators through ``Depends`` so tests can
override a single layer (usually ``get_db_session_maker``) and get the rest
built on top of it.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from routemaker.server.auth.authorization import (
    MembershipAuthority,
    get_membership_authority,
)
from routemaker.server.services.location_service import LocationService
from routemaker.server.services.org_invitation_service import OrgInvitationService
from routemaker.server.services.org_member_service import OrgMemberService
from routemaker.server.services.org_service import OrgService
from routemaker.server.services.profile_service import ProfileService
from routemaker.server.services.project_service import ProjectService
from routemaker.server.services.technician_service import TechnicianService
from routemaker.storage.database import get_db_session_maker
from routemaker.storage.location import Location
from routemaker.storage.org_invitation_store import OrgInvitationStore
from routemaker.storage.org_member_store import OrgMemberStore
from routemaker.storage.org_store import OrgStore
from routemaker.storage.profile_store import ProfileStore
from routemaker.storage.project import Project
from routemaker.storage.tenant_resource_store import TechnicianStore, TenantResourceStore


def get_org_member_store(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_db_session_maker),
) -> OrgMemberStore:
    return OrgMemberStore(session_maker)


def get_org_service(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_db_session_maker),
    authority: MembershipAuthority = Depends(get_membership_authority),
) -> OrgService:
    return OrgService(OrgStore(session_maker), authority)


def get_org_member_service(
    member_store: OrgMemberStore = Depends(get_org_member_store),
    authority: MembershipAuthority = Depends(get_membership_authority),
) -> OrgMemberService:
    return OrgMemberService(member_store, authority)


def get_org_invitation_service(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_db_session_maker),
    member_store: OrgMemberStore = Depends(get_org_member_store),
    authority: MembershipAuthority = Depends(get_membership_authority),
) -> OrgInvitationService:
    return OrgInvitationService(
        org_store=OrgStore(session_maker),
        member_store=member_store,
        invitation_store=OrgInvitationStore(session_maker),
        authority=authority,
    )


def get_project_service(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_db_session_maker),
    authority: MembershipAuthority = Depends(get_membership_authority),
) -> ProjectService:
    return ProjectService(TenantResourceStore(session_maker, Project), authority)


def get_location_service(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_db_session_maker),
    authority: MembershipAuthority = Depends(get_membership_authority),
) -> LocationService:
    return LocationService(
        TenantResourceStore(session_maker, Location, default_order='name'),
        authority,
    )


def get_technician_service(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_db_session_maker),
    authority: MembershipAuthority = Depends(get_membership_authority),
) -> TechnicianService:
    return TechnicianService(TechnicianStore(session_maker), authority)


def get_profile_service(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_db_session_maker),
) -> ProfileService:
    return ProfileService(ProfileStore(session_maker))
