"""Service for organization lifecycle operations."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.auth.authorization import MembershipAuthority, RoleName
from routemaker.server.auth.user_auth import UserIdentity
from routemaker.server.errors import ValidationError
from routemaker.server.routes.org_models import NotAMemberError, OrgNotFoundError
from routemaker.server.utils.slugify import generate_unique_slug, slugify
from routemaker.storage.org import Org
from routemaker.storage.org_store import OrgStore


@dataclass
class OrgService:
    """Organization operations.

    Role checks for update and delete are done by the route's permission
    dependency; this service only resolves roles where it reports them.
    """

    org_store: OrgStore
    authority: MembershipAuthority

    async def list_user_orgs(self, user_id: UUID) -> list[dict]:
        return await self.org_store.get_user_organizations(user_id)

    async def create_org(self, name: str, identity: UserIdentity) -> Org:
        name = (name or '').strip()
        if not name:
            raise ValidationError('Organization name is required')

        base_slug = slugify(name)
        existing = await self.org_store.get_slugs_with_prefix(base_slug)
        slug = generate_unique_slug(base_slug, existing)

        return await self.org_store.create_org_with_owner(
            name=name,
            slug=slug,
            user_id=identity.user_id,
            email=identity.email,
        )

    async def get_org(self, org_id: UUID, user_id: UUID) -> tuple[Org, RoleName]:
        role = await self.authority.resolve_role(user_id, org_id)
        if role is None:
            raise NotAMemberError()
        org = await self.org_store.get_org_by_id(org_id)
        if not org:
            raise OrgNotFoundError(str(org_id))
        return org, role

    async def update_org(self, org_id: UUID, updates: dict[str, Any]) -> Org:
        org = await self.org_store.update_org(org_id, updates)
        if not org:
            raise OrgNotFoundError(str(org_id))
        logger.info(
            'Updated organization',
            extra={'org_id': str(org_id), 'fields': sorted(updates)},
        )
        return org

    async def delete_org(self, org_id: UUID) -> None:
        org = await self.org_store.delete_org_cascade(org_id)
        if not org:
            raise OrgNotFoundError(str(org_id))
