"""Service for managing organization members."""

from dataclasses import dataclass
from uuid import UUID

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.auth.authorization import (
    MembershipAuthority,
    RoleName,
    meets,
    parse_role,
)
from routemaker.server.errors import ValidationError
from routemaker.server.routes.org_models import (
    InsufficientRoleError,
    MemberProfile,
    NotAMemberError,
    OrgMemberNotFoundError,
    OrgMemberResponse,
)
from routemaker.storage.org_member import OrgMember
from routemaker.storage.org_member_store import OrgMemberStore


@dataclass
class OrgMemberService:
    """Service for organization member operations."""

    member_store: OrgMemberStore
    authority: MembershipAuthority

    async def _require_role(
        self, org_id: UUID, user_id: UUID, min_role: RoleName
    ) -> RoleName:
        role = await self.authority.resolve_role(user_id, org_id)
        if role is None:
            raise NotAMemberError()
        if not meets(role, min_role):
            raise InsufficientRoleError()
        return role

    async def list_members(
        self, org_id: UUID, current_user_id: UUID
    ) -> list[OrgMemberResponse]:
        await self._require_role(org_id, current_user_id, RoleName.MEMBER)

        rows = await self.member_store.get_org_members_with_profiles(org_id)
        return [
            OrgMemberResponse(
                id=member.id,
                user_id=member.user_id,
                email=member.email,
                role=member.role,
                created_at=member.created_at,
                profile=(
                    MemberProfile(
                        first_name=profile.first_name,
                        last_name=profile.last_name,
                        avatar_url=profile.avatar_url,
                    )
                    if profile
                    else None
                ),
            )
            for member, profile in rows
        ]

    async def update_member_role(
        self,
        org_id: UUID,
        member_id: UUID,
        role_name: str,
        current_user_id: UUID,
    ) -> OrgMember:
        """Change a member's role.

        Only owners may grant the owner role or change an owner's role.

        Raises:
            ValidationError: If the role is not a valid role name
            NotAMemberError / InsufficientRoleError: If the caller may not do this
            OrgMemberNotFoundError: If the membership does not exist
            LastOwnerError: If the sole owner would be demoted
        """
        new_role = parse_role(role_name)
        if new_role is None:
            raise ValidationError(f'Invalid role: {role_name}')

        actor_role = await self._require_role(org_id, current_user_id, RoleName.ADMIN)

        target = await self.member_store.get_org_member_by_id(org_id, member_id)
        if not target:
            raise OrgMemberNotFoundError()

        touches_owner = new_role == RoleName.OWNER or target.role == RoleName.OWNER.value
        if touches_owner and actor_role != RoleName.OWNER:
            raise InsufficientRoleError('Only owners can grant or revoke the owner role')

        updated = await self.member_store.update_member_role(
            org_id, member_id, new_role.value
        )
        if not updated:
            raise OrgMemberNotFoundError()
        return updated

    async def remove_member(
        self, org_id: UUID, member_id: UUID, current_user_id: UUID
    ) -> None:
        actor_role = await self._require_role(org_id, current_user_id, RoleName.ADMIN)

        target = await self.member_store.get_org_member_by_id(org_id, member_id)
        if not target:
            raise OrgMemberNotFoundError()

        if target.role == RoleName.OWNER.value and actor_role != RoleName.OWNER:
            raise InsufficientRoleError('Admins cannot remove owners')

        if not await self.member_store.remove_member(org_id, member_id):
            raise OrgMemberNotFoundError()

    async def leave(self, org_id: UUID, user_id: UUID) -> None:
        """Remove the caller's own membership.

        Raises:
            NotAMemberError: If the caller is not a member
            LastOwnerError: If the caller is the sole owner
        """
        if not await self.member_store.remove_user_from_org(org_id, user_id):
            raise NotAMemberError()
        logger.info(
            'User left organization',
            extra={'org_id': str(org_id), 'user_id': str(user_id)},
        )
