from routemaker.storage.base import Base
from routemaker.storage.location import Location
from routemaker.storage.org import Org
from routemaker.storage.org_invitation import OrgInvitation
from routemaker.storage.org_member import OrgMember
from routemaker.storage.profile import Profile
from routemaker.storage.project import Project
from routemaker.storage.technician import Technician

__all__ = [
    'Base',
    'Location',
    'Org',
    'OrgInvitation',
    'OrgMember',
    'Profile',
    'Project',
    'Technician',
]
