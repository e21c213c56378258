"""
Pydantic models and custom exceptions for organization invitations.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from routemaker.server.errors import ConflictError, ForbiddenError, NotFoundError
from routemaker.storage.org_invitation import OrgInvitation


class InvitationNotFoundError(NotFoundError):
    """Raised when no invitation matches the token or id."""

    def __init__(self, message: str = 'Invitation not found'):
        super().__init__(message)


class UserAlreadyMemberError(ConflictError):
    """Raised when the user is already a member of the organization."""

    def __init__(self, message: str = 'User is already a member of this organization'):
        super().__init__(message)


class InvitationExpiredError(ConflictError):
    """Raised when the invitation has expired."""

    def __init__(self, message: str = 'Invitation has expired'):
        super().__init__(message)


class InvitationInvalidError(ConflictError):
    """Raised when the invitation is no longer pending."""

    def __init__(self, message: str = 'Invitation is no longer valid'):
        super().__init__(message)


class InsufficientPermissionError(ForbiddenError):
    """Raised when the user lacks permission to perform the action."""

    def __init__(self, message: str = 'Insufficient permissions'):
        super().__init__(message)


class EmailMismatchError(ForbiddenError):
    """Raised when the accepting user's email doesn't match the invitation email."""

    def __init__(self, message: str = 'Your email does not match the invitation'):
        super().__init__(message)


class InvitationCreate(BaseModel):
    """Request model for creating an invitation."""

    organization_id: UUID
    email: EmailStr
    role: str = 'member'


class BatchInvitationCreate(BaseModel):
    """Request model for inviting several emails with the same role."""

    organization_id: UUID
    emails: list[EmailStr] = Field(min_length=1)
    role: str = 'member'


class InvitationResponse(BaseModel):
    """Response model for invitation details."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    email: str
    role: str
    status: str
    invited_by: UUID
    expires_at: datetime
    accepted_at: datetime | None = None
    created_at: datetime


class InvitationCreateResponse(BaseModel):
    invitation: InvitationResponse
    invite_url: str


class InvitationList(BaseModel):
    invitations: list[InvitationResponse]


class InvitationOrganization(BaseModel):
    name: str
    logo_url: str | None = None


class InvitationDetails(InvitationResponse):
    """An invitation as shown to its recipient, with the organization's branding."""

    organization: InvitationOrganization

    @classmethod
    def from_invitation(cls, invitation: OrgInvitation) -> 'InvitationDetails':
        """Create InvitationDetails from an invitation loaded with its organization."""
        base = InvitationResponse.model_validate(invitation)
        return cls(
            **base.model_dump(),
            organization=InvitationOrganization(
                name=invitation.org.name, logo_url=invitation.org.logo_url
            ),
        )


class InvitationDetailsResponse(BaseModel):
    invitation: InvitationDetails


class InvitationFailure(BaseModel):
    """Response model for a failed invitation."""

    email: str
    error: str


class BatchInvitationResponse(BaseModel):
    """Response model for batch invitation creation."""

    successful: list[InvitationResponse]
    failed: list[InvitationFailure]


class AcceptInvitationResponse(BaseModel):
    success: bool = True
    organization_id: UUID


class SuccessResponse(BaseModel):
    success: bool = True
