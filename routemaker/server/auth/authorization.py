"""
Role resolution and permission checks for organization-scoped endpoints.

Roles form a closed hierarchy (member < admin < owner). Every guarded action
is named by a ``Permission`` which maps to the minimum role allowed to
perform it. ``MembershipAuthority`` answers membership questions without side
effects; ``require_permission`` turns its answers into HTTP errors.

Usage:
    from routemaker.server.auth.authorization import (
        Permission,
        require_permission,
    )

    @router.patch('/{org_id}')
    async def update_org(
        org_id: UUID,
        identity: UserIdentity = Depends(
            require_permission(Permission.EDIT_ORGANIZATION)
        ),
    ):
        ...
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.auth.user_auth import UserIdentity, get_user_identity
from routemaker.storage.database import get_db_session_maker
from routemaker.storage.org_member_store import OrgMemberStore


class RoleName(str, Enum):
    """Role names used in the system."""

    OWNER = 'owner'
    ADMIN = 'admin'
    MEMBER = 'member'


ROLE_RANK: dict[RoleName, int] = {
    RoleName.MEMBER: 1,
    RoleName.ADMIN: 2,
    RoleName.OWNER: 3,
}


def parse_role(role_name: Optional[str]) -> Optional[RoleName]:
    try:
        return RoleName(role_name)
    except ValueError:
        return None


def meets(role: Optional[RoleName], min_role: RoleName) -> bool:
    """True if ``role`` ranks at or above ``min_role``; unknown roles never do."""
    if role is None:
        return False
    return ROLE_RANK[role] >= ROLE_RANK[min_role]


class Permission(str, Enum):
    """Guarded actions within an organization."""

    # Organization Management
    VIEW_ORGANIZATION = 'view_organization'
    EDIT_ORGANIZATION = 'edit_organization'
    DELETE_ORGANIZATION = 'delete_organization'

    # Organization Members
    MANAGE_MEMBERS = 'manage_members'
    INVITE_USER_TO_ORGANIZATION = 'invite_user_to_organization'

    # Tenant resources
    MANAGE_RESOURCES = 'manage_resources'
    DELETE_PROJECT = 'delete_project'


PERMISSION_MIN_ROLE: dict[Permission, RoleName] = {
    Permission.VIEW_ORGANIZATION: RoleName.MEMBER,
    Permission.EDIT_ORGANIZATION: RoleName.ADMIN,
    Permission.DELETE_ORGANIZATION: RoleName.OWNER,
    Permission.MANAGE_MEMBERS: RoleName.ADMIN,
    Permission.INVITE_USER_TO_ORGANIZATION: RoleName.ADMIN,
    Permission.MANAGE_RESOURCES: RoleName.MEMBER,
    Permission.DELETE_PROJECT: RoleName.ADMIN,
}


class AuthorizationResult(str, Enum):
    OK = 'ok'
    NOT_A_MEMBER = 'not_a_member'
    INSUFFICIENT_ROLE = 'insufficient_role'


@dataclass
class MembershipAuthority:
    """Answers whether a user holds a role in an organization."""

    member_store: OrgMemberStore

    async def resolve_role(self, user_id: UUID, org_id: UUID) -> Optional[RoleName]:
        member = await self.member_store.get_org_member(org_id, user_id)
        if not member:
            return None
        role = parse_role(member.role)
        if role is None:
            logger.warning(
                'Membership has unknown role',
                extra={'user_id': str(user_id), 'org_id': str(org_id)},
            )
        return role

    async def check_role(
        self, user_id: UUID, org_id: UUID, min_role: RoleName
    ) -> AuthorizationResult:
        member = await self.member_store.get_org_member(org_id, user_id)
        if not member:
            return AuthorizationResult.NOT_A_MEMBER
        if not meets(parse_role(member.role), min_role):
            return AuthorizationResult.INSUFFICIENT_ROLE
        return AuthorizationResult.OK

    async def check_permission(
        self, user_id: UUID, org_id: UUID, permission: Permission
    ) -> AuthorizationResult:
        return await self.check_role(
            user_id, org_id, PERMISSION_MIN_ROLE[permission]
        )


def get_membership_authority(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_db_session_maker),
) -> MembershipAuthority:
    return MembershipAuthority(OrgMemberStore(session_maker))


def require_permission(permission: Permission):
    """
    Factory function that creates a dependency to require a specific permission.

    The dependency authenticates the caller, resolves their role in the
    organization named by the ``org_id`` path parameter and returns the
    caller's identity if authorized. Otherwise it raises 401 or 403.
    """

    async def permission_checker(
        org_id: UUID,
        identity: UserIdentity = Depends(get_user_identity),
        authority: MembershipAuthority = Depends(get_membership_authority),
    ) -> UserIdentity:
        result = await authority.check_permission(
            identity.user_id, org_id, permission
        )

        if result == AuthorizationResult.NOT_A_MEMBER:
            logger.warning(
                'User not a member of organization',
                extra={'user_id': str(identity.user_id), 'org_id': str(org_id)},
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail='Not a member of this organization',
            )

        if result == AuthorizationResult.INSUFFICIENT_ROLE:
            logger.warning(
                'Insufficient permissions',
                extra={
                    'user_id': str(identity.user_id),
                    'org_id': str(org_id),
                    'required_permission': permission.value,
                },
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail='Insufficient permissions',
            )

        return identity

    return permission_checker
