import math
from dataclasses import dataclass
from typing import Any, ClassVar, Optional
from uuid import UUID

from routemaker.server.services.tenant_resource_service import TenantResourceService
from routemaker.storage.technician import Technician
from routemaker.storage.tenant_resource_store import TechnicianStore


@dataclass
class TechnicianService(TenantResourceService[Technician]):
    store: TechnicianStore

    resource_name: ClassVar[str] = 'Technician'

    async def list_page(
        self,
        org_id: UUID,
        user_id: UUID,
        search: Optional[str] = None,
        employment_type: Optional[str] = None,
        active: Optional[bool] = None,
        sort_by: str = 'full_name',
        sort_desc: bool = False,
        page: int = 1,
        page_size: int = 25,
    ) -> dict[str, Any]:
        """One page of technicians plus paging metadata.

        Returns:
            {data, count, page, page_size, total_pages}
        """
        await self._authorize(user_id, org_id)
        rows, count = await self.store.search(
            org_id,
            search=search,
            employment_type=employment_type,
            active=active,
            sort_by=sort_by,
            sort_desc=sort_desc,
            page=page,
            page_size=page_size,
        )
        return {
            'data': rows,
            'count': count,
            'page': page,
            'page_size': page_size,
            'total_pages': math.ceil(count / page_size) if count else 0,
        }
