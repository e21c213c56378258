"""
Pydantic models and custom exceptions for organizations and members.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from routemaker.server.errors import ConflictError, ForbiddenError, NotFoundError


class OrgNotFoundError(NotFoundError):
    """Raised when an organization does not exist."""

    def __init__(self, org_id: str | None = None):
        message = (
            f'Organization with id "{org_id}" not found'
            if org_id
            else 'Organization not found'
        )
        super().__init__(message)


class OrgSlugExistsError(ConflictError):
    """Raised when a generated slug collides with an existing organization."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f'Organization slug "{slug}" already exists')


class OrgMemberNotFoundError(NotFoundError):
    """Raised when a membership does not exist in the organization."""

    def __init__(self, message: str = 'Member not found in this organization'):
        super().__init__(message)


class NotAMemberError(ForbiddenError):
    """Raised when the caller is not a member of the organization."""

    def __init__(self, message: str = 'Not a member of this organization'):
        super().__init__(message)


class InsufficientRoleError(ForbiddenError):
    """Raised when the caller's role is below what the action requires."""

    def __init__(self, message: str = 'Insufficient permissions'):
        super().__init__(message)


class LastOwnerError(ConflictError):
    """Raised when an action would leave the organization without an owner."""

    def __init__(
        self,
        message: str = 'Cannot remove the last owner of an organization. Transfer ownership first.',
    ):
        super().__init__(message)


class OrgCreate(BaseModel):
    """Request model for creating an organization."""

    name: str = Field(min_length=1, max_length=255)

    @field_validator('name')
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError('Organization name is required')
        return value


class OrgUpdate(BaseModel):
    """Request model for updating an organization.

    Only the fields that are present in the request are applied.
    """

    name: str | None = Field(default=None, max_length=255)
    logo_url: str | None = None
    settings: dict[str, Any] | None = None

    @field_validator('name')
    @classmethod
    def strip_name(cls, value: str | None) -> str:
        if value is None:
            raise ValueError('Organization name cannot be null')
        value = value.strip()
        if not value:
            raise ValueError('Organization name cannot be blank')
        return value

    @field_validator('settings')
    @classmethod
    def settings_not_null(cls, value: dict[str, Any] | None) -> dict[str, Any]:
        if value is None:
            raise ValueError('settings cannot be null')
        return value


class OrgResponse(BaseModel):
    """Response model for an organization."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    logo_url: str | None = None
    settings: dict[str, Any] = Field(default_factory=dict)
    created_by: UUID
    created_at: datetime
    updated_at: datetime


class OrgDetailResponse(BaseModel):
    """An organization together with the caller's role in it."""

    organization: OrgResponse
    role: str


class UserOrgSummary(BaseModel):
    """One row of ``get_user_organizations``."""

    id: UUID
    name: str
    slug: str
    role: str
    logo_url: str | None = None


class UserOrgList(BaseModel):
    organizations: list[UserOrgSummary]


class MemberProfile(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    avatar_url: str | None = None


class OrgMemberResponse(BaseModel):
    """Response model for an organization member."""

    id: UUID
    user_id: UUID
    email: str | None = None
    role: str
    created_at: datetime
    profile: MemberProfile | None = None


class OrgMemberList(BaseModel):
    members: list[OrgMemberResponse]


class OrgMemberUpdate(BaseModel):
    """Request model for changing a member's role."""

    role: str
