"""
Store class for managing organization memberships.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.constants import ROLE_OWNER
from routemaker.server.routes.org_models import LastOwnerError
from routemaker.storage.org_member import OrgMember
from routemaker.storage.profile import Profile


@dataclass
class OrgMemberStore:
    """Store for organization memberships.

    Every mutation that can reduce the number of owners locks the
    organization's owner rows and re-counts them inside the same
    transaction, so an organization never ends up without an owner.
    """

    session_maker: async_sessionmaker[AsyncSession]

    async def get_org_member(self, org_id: UUID, user_id: UUID) -> Optional[OrgMember]:
        async with self.session_maker() as session:
            result = await session.execute(
                select(OrgMember).filter(
                    OrgMember.organization_id == org_id,
                    OrgMember.user_id == user_id,
                )
            )
            return result.scalars().first()

    async def get_org_member_by_id(
        self, org_id: UUID, member_id: UUID
    ) -> Optional[OrgMember]:
        async with self.session_maker() as session:
            result = await session.execute(
                select(OrgMember).filter(
                    OrgMember.organization_id == org_id,
                    OrgMember.id == member_id,
                )
            )
            return result.scalars().first()

    async def get_org_member_by_email(
        self, org_id: UUID, email: str
    ) -> Optional[OrgMember]:
        async with self.session_maker() as session:
            result = await session.execute(
                select(OrgMember).filter(
                    OrgMember.organization_id == org_id,
                    func.lower(OrgMember.email) == email.lower().strip(),
                )
            )
            return result.scalars().first()

    async def get_org_members_with_profiles(
        self, org_id: UUID
    ) -> list[tuple[OrgMember, Optional[Profile]]]:
        """List members of an organization joined with their profiles."""
        async with self.session_maker() as session:
            result = await session.execute(
                select(OrgMember, Profile)
                .outerjoin(Profile, Profile.id == OrgMember.user_id)
                .filter(OrgMember.organization_id == org_id)
                .order_by(OrgMember.created_at)
            )
            return [(member, profile) for member, profile in result.all()]

    async def count_owners(self, org_id: UUID) -> int:
        async with self.session_maker() as session:
            result = await session.execute(
                select(func.count(OrgMember.id)).filter(
                    OrgMember.organization_id == org_id,
                    OrgMember.role == ROLE_OWNER,
                )
            )
            return result.scalar_one()

    @staticmethod
    async def _lock_owner_count(session: AsyncSession, org_id: UUID) -> int:
        result = await session.execute(
            select(OrgMember.id)
            .filter(
                OrgMember.organization_id == org_id,
                OrgMember.role == ROLE_OWNER,
            )
            .with_for_update()
        )
        return len(result.scalars().all())

    async def update_member_role(
        self, org_id: UUID, member_id: UUID, role: str
    ) -> Optional[OrgMember]:
        """Change a member's role.

        Raises:
            LastOwnerError: If the member is the sole owner and would be demoted
        """
        async with self.session_maker() as session:
            result = await session.execute(
                select(OrgMember)
                .filter(
                    OrgMember.organization_id == org_id,
                    OrgMember.id == member_id,
                )
                .with_for_update()
            )
            member = result.scalars().first()
            if not member:
                return None

            if member.role == ROLE_OWNER and role != ROLE_OWNER:
                if await self._lock_owner_count(session, org_id) <= 1:
                    raise LastOwnerError(
                        'Cannot demote the last owner of an organization'
                    )

            old_role = member.role
            member.role = role
            await session.commit()
            await session.refresh(member)

            logger.info(
                'Updated member role',
                extra={
                    'org_id': str(org_id),
                    'member_id': str(member_id),
                    'old_role': old_role,
                    'new_role': role,
                },
            )
            return member

    async def remove_member(self, org_id: UUID, member_id: UUID) -> bool:
        """Delete a membership by its id.

        Raises:
            LastOwnerError: If the membership is the sole owner
        """
        async with self.session_maker() as session:
            result = await session.execute(
                select(OrgMember)
                .filter(
                    OrgMember.organization_id == org_id,
                    OrgMember.id == member_id,
                )
                .with_for_update()
            )
            member = result.scalars().first()
            if not member:
                return False
            return await self._delete_guarded(session, member)

    async def remove_user_from_org(self, org_id: UUID, user_id: UUID) -> bool:
        """Delete the membership of a user (used when leaving).

        Raises:
            LastOwnerError: If the user is the sole owner
        """
        async with self.session_maker() as session:
            result = await session.execute(
                select(OrgMember)
                .filter(
                    OrgMember.organization_id == org_id,
                    OrgMember.user_id == user_id,
                )
                .with_for_update()
            )
            member = result.scalars().first()
            if not member:
                return False
            return await self._delete_guarded(session, member)

    async def _delete_guarded(self, session: AsyncSession, member: OrgMember) -> bool:
        org_id = member.organization_id
        if member.role == ROLE_OWNER:
            if await self._lock_owner_count(session, org_id) <= 1:
                raise LastOwnerError()

        await session.delete(member)
        await session.commit()

        logger.info(
            'Removed member from organization',
            extra={
                'org_id': str(org_id),
                'member_id': str(member.id),
                'user_id': str(member.user_id),
            },
        )
        return True
