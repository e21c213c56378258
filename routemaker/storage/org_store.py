"""
Store class for managing organizations.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.constants import ROLE_OWNER
from routemaker.server.routes.org_models import OrgSlugExistsError
from routemaker.storage.location import Location
from routemaker.storage.org import Org
from routemaker.storage.org_invitation import OrgInvitation
from routemaker.storage.org_member import OrgMember
from routemaker.storage.project import Project
from routemaker.storage.technician import Technician

# Tables owned by an organization, deleted before the organization itself
ORG_OWNED_MODELS = (OrgInvitation, Project, Location, Technician, OrgMember)

UPDATABLE_ORG_FIELDS = frozenset({'name', 'logo_url', 'settings'})


@dataclass
class OrgStore:
    """Store for managing organizations."""

    session_maker: async_sessionmaker[AsyncSession]

    async def get_org_by_id(self, org_id: UUID) -> Optional[Org]:
        async with self.session_maker() as session:
            result = await session.execute(select(Org).filter(Org.id == org_id))
            return result.scalars().first()

    async def get_slugs_with_prefix(self, prefix: str) -> set[str]:
        """Existing slugs equal to ``prefix`` or starting with ``prefix-``."""
        async with self.session_maker() as session:
            result = await session.execute(
                select(Org.slug).filter(
                    (Org.slug == prefix) | Org.slug.startswith(f'{prefix}-')
                )
            )
            return set(result.scalars().all())

    async def get_user_organizations(self, user_id: UUID) -> list[dict]:
        """Organizations the user belongs to, with the user's role.

        Returns:
            List of dicts with id, name, slug, role and logo_url, ordered by name
        """
        async with self.session_maker() as session:
            result = await session.execute(
                select(Org, OrgMember.role)
                .join(OrgMember, Org.id == OrgMember.organization_id)
                .filter(OrgMember.user_id == user_id)
                .order_by(Org.name)
            )
            return [
                {
                    'id': org.id,
                    'name': org.name,
                    'slug': org.slug,
                    'role': role,
                    'logo_url': org.logo_url,
                }
                for org, role in result.all()
            ]

    async def create_org_with_owner(
        self,
        name: str,
        slug: str,
        user_id: UUID,
        email: Optional[str] = None,
    ) -> Org:
        """
        Persist an organization and its owner membership in a single transaction.

        Raises:
            OrgSlugExistsError: If the slug was taken concurrently
        """
        async with self.session_maker() as session:
            org = Org(name=name, slug=slug, created_by=user_id, settings={})
            session.add(org)
            try:
                await session.flush()
                session.add(
                    OrgMember(
                        organization_id=org.id,
                        user_id=user_id,
                        email=email.lower().strip() if email else None,
                        role=ROLE_OWNER,
                    )
                )
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise OrgSlugExistsError(slug)
            await session.refresh(org)

            logger.info(
                'Created organization',
                extra={'org_id': str(org.id), 'slug': slug, 'user_id': str(user_id)},
            )
            return org

    async def update_org(self, org_id: UUID, kwargs: dict) -> Optional[Org]:
        """Update organization details; keys outside name/logo_url/settings are ignored."""
        async with self.session_maker() as session:
            result = await session.execute(select(Org).filter(Org.id == org_id))
            org = result.scalars().first()
            if not org:
                return None

            for key, value in kwargs.items():
                if key in UPDATABLE_ORG_FIELDS:
                    setattr(org, key, value)

            await session.commit()
            await session.refresh(org)
            return org

    async def delete_org_cascade(self, org_id: UUID) -> Optional[Org]:
        """
        Delete an organization and everything it owns in one transaction.

        Returns:
            Org: The deleted organization, or None if not found
        """
        async with self.session_maker() as session:
            result = await session.execute(select(Org).filter(Org.id == org_id))
            org = result.scalars().first()
            if not org:
                return None

            try:
                for model in ORG_OWNED_MODELS:
                    await session.execute(
                        delete(model).where(model.organization_id == org_id)
                    )
                await session.delete(org)
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error(
                    'Failed to delete organization - transaction rolled back',
                    extra={'org_id': str(org_id), 'error': str(e)},
                )
                raise

            logger.info(
                'Deleted organization and all associated data',
                extra={'org_id': str(org_id), 'org_name': org.name},
            )
            return org
