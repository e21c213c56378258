"""
Organization-scoped CRUD with a membership check before every operation.

Subclasses bind a store and may raise the role required for deletion.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Generic
from uuid import UUID

from routemaker.server.auth.authorization import (
    AuthorizationResult,
    MembershipAuthority,
    RoleName,
)
from routemaker.server.errors import ForbiddenError, NotFoundError, ValidationError
from routemaker.storage.tenant_resource_store import (
    ModelT,
    TenantResourceStore,
    strip_protected_fields,
)


@dataclass
class TenantResourceService(Generic[ModelT]):
    store: TenantResourceStore[ModelT]
    authority: MembershipAuthority

    resource_name: ClassVar[str] = 'Resource'
    delete_role: ClassVar[RoleName] = RoleName.MEMBER

    async def _authorize(
        self,
        user_id: UUID,
        org_id: UUID,
        min_role: RoleName = RoleName.MEMBER,
        not_member_message: str = 'Not a member of this organization',
    ) -> None:
        result = await self.authority.check_role(user_id, org_id, min_role)
        if result == AuthorizationResult.NOT_A_MEMBER:
            raise ForbiddenError(not_member_message)
        if result == AuthorizationResult.INSUFFICIENT_ROLE:
            raise ForbiddenError('Insufficient permissions')

    async def _load(self, resource_id: UUID, user_id: UUID) -> ModelT:
        """Fetch a row and check the caller belongs to its organization."""
        resource = await self.store.get(resource_id)
        if not resource:
            raise NotFoundError(f'{self.resource_name} not found')
        await self._authorize(
            user_id, resource.organization_id, not_member_message='Access denied'
        )
        return resource

    async def list_for_org(self, org_id: UUID, user_id: UUID) -> list[ModelT]:
        await self._authorize(user_id, org_id)
        return await self.store.list_for_org(org_id)

    async def get(self, resource_id: UUID, user_id: UUID) -> ModelT:
        return await self._load(resource_id, user_id)

    async def create(
        self, org_id: UUID, data: dict[str, Any], user_id: UUID
    ) -> ModelT:
        await self._authorize(user_id, org_id)
        values = strip_protected_fields(data)
        values['created_by'] = user_id
        return await self.store.create(org_id, values)

    async def update(
        self, resource_id: UUID, data: dict[str, Any], user_id: UUID
    ) -> ModelT:
        """
        Raises:
            ValidationError: If a required field is set to null
        """
        resource = await self._load(resource_id, user_id)
        values = strip_protected_fields(data)
        nulls = sorted(
            key
            for key, value in values.items()
            if value is None and key in self.store.required_columns()
        )
        if nulls:
            raise ValidationError(f'{", ".join(nulls)} cannot be null')

        updated = await self.store.update(resource.organization_id, resource_id, values)
        if not updated:
            raise NotFoundError(f'{self.resource_name} not found')
        return updated

    async def delete(self, resource_id: UUID, user_id: UUID) -> None:
        resource = await self.store.get(resource_id)
        if not resource:
            raise NotFoundError(f'{self.resource_name} not found')
        await self._authorize(
            user_id,
            resource.organization_id,
            min_role=self.delete_role,
            not_member_message='Access denied',
        )
        await self.store.delete(resource.organization_id, resource_id)
