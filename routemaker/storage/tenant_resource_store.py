"""
Generic organization-scoped CRUD store used for projects, locations and
technicians.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from routemaker.core.logger import routemaker_logger as logger
from routemaker.storage.location import Location
from routemaker.storage.project import Project
from routemaker.storage.technician import Technician

ModelT = TypeVar('ModelT', Project, Location, Technician)

# Never written through update(); the stored tenant cannot change
PROTECTED_FIELDS = frozenset(
    {'id', 'organization_id', 'created_by', 'created_at', 'updated_at'}
)


def strip_protected_fields(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in PROTECTED_FIELDS}


@dataclass
class TenantResourceStore(Generic[ModelT]):
    """CRUD for one model, with every query filtered by organization."""

    session_maker: async_sessionmaker[AsyncSession]
    model: type[ModelT]
    default_order: str = 'created_at'

    def _columns(self) -> set[str]:
        return {column.name for column in self.model.__table__.columns}

    def required_columns(self) -> set[str]:
        """Columns that may not be set to NULL."""
        return {
            column.name
            for column in self.model.__table__.columns
            if not column.nullable
        }

    async def list_for_org(self, org_id: UUID) -> list[ModelT]:
        order_column = getattr(self.model, self.default_order)
        async with self.session_maker() as session:
            result = await session.execute(
                select(self.model)
                .filter(self.model.organization_id == org_id)
                .order_by(order_column)
            )
            return list(result.scalars().all())

    async def get(self, resource_id: UUID) -> Optional[ModelT]:
        async with self.session_maker() as session:
            result = await session.execute(
                select(self.model).filter(self.model.id == resource_id)
            )
            return result.scalars().first()

    async def get_many(self, resource_ids: list[UUID]) -> list[ModelT]:
        if not resource_ids:
            return []
        async with self.session_maker() as session:
            result = await session.execute(
                select(self.model).filter(self.model.id.in_(resource_ids))
            )
            return list(result.scalars().all())

    async def create(self, org_id: UUID, data: dict[str, Any]) -> ModelT:
        """Insert a row owned by ``org_id``; unknown keys are ignored."""
        columns = self._columns()
        values = {
            k: v
            for k, v in data.items()
            if k in columns and k not in ('id', 'organization_id')
        }
        async with self.session_maker() as session:
            resource = self.model(organization_id=org_id, **values)
            session.add(resource)
            await session.commit()
            await session.refresh(resource)

            logger.info(
                f'Created {self.model.__tablename__} row',
                extra={'org_id': str(org_id), 'resource_id': str(resource.id)},
            )
            return resource

    async def update(
        self, org_id: UUID, resource_id: UUID, data: dict[str, Any]
    ) -> Optional[ModelT]:
        columns = self._columns()
        values = {k: v for k, v in strip_protected_fields(data).items() if k in columns}
        async with self.session_maker() as session:
            result = await session.execute(
                select(self.model).filter(
                    self.model.id == resource_id,
                    self.model.organization_id == org_id,
                )
            )
            resource = result.scalars().first()
            if not resource:
                return None

            for key, value in values.items():
                setattr(resource, key, value)
            await session.commit()
            await session.refresh(resource)
            return resource

    async def delete(self, org_id: UUID, resource_id: UUID) -> bool:
        async with self.session_maker() as session:
            result = await session.execute(
                select(self.model).filter(
                    self.model.id == resource_id,
                    self.model.organization_id == org_id,
                )
            )
            resource = result.scalars().first()
            if not resource:
                return False

            await session.delete(resource)
            await session.commit()

            logger.info(
                f'Deleted {self.model.__tablename__} row',
                extra={
                    'org_id': str(resource.organization_id),
                    'resource_id': str(resource_id),
                },
            )
            return True


TECHNICIAN_SORT_FIELDS = frozenset(
    {'full_name', 'employment_type', 'cost_amount', 'created_at', 'updated_at'}
)


@dataclass
class TechnicianStore(TenantResourceStore[Technician]):
    model: type[Technician] = Technician
    default_order: str = 'full_name'

    async def search(
        self,
        org_id: UUID,
        search: Optional[str] = None,
        employment_type: Optional[str] = None,
        active: Optional[bool] = None,
        sort_by: str = 'full_name',
        sort_desc: bool = False,
        page: int = 1,
        page_size: int = 25,
    ) -> tuple[list[Technician], int]:
        """Filtered, sorted page of technicians.

        Returns:
            (rows, total count matching the filters)
        """
        filters = [Technician.organization_id == org_id]
        if search:
            filters.append(Technician.full_name.ilike(f'%{search.strip()}%'))
        if employment_type:
            filters.append(Technician.employment_type == employment_type)
        if active is not None:
            filters.append(Technician.active == active)

        if sort_by not in TECHNICIAN_SORT_FIELDS:
            sort_by = 'full_name'
        order_column = getattr(Technician, sort_by)
        order = order_column.desc() if sort_desc else order_column.asc()

        async with self.session_maker() as session:
            total = (
                await session.execute(
                    select(func.count(Technician.id)).filter(*filters)
                )
            ).scalar_one()
            result = await session.execute(
                select(Technician)
                .filter(*filters)
                .order_by(order, Technician.id)
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            return list(result.scalars().all()), total
