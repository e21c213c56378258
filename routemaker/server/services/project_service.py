from dataclasses import dataclass
from typing import ClassVar

from routemaker.server.auth.authorization import RoleName
from routemaker.server.services.tenant_resource_service import TenantResourceService
from routemaker.storage.project import Project


@dataclass
class ProjectService(TenantResourceService[Project]):
    resource_name: ClassVar[str] = 'Project'
    delete_role: ClassVar[RoleName] = RoleName.ADMIN
