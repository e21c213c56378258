"""API routes for organization invitations."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.auth.user_auth import UserIdentity, get_user_identity
from routemaker.server.dependencies import get_org_invitation_service
from routemaker.server.errors import RouteMakerError, to_http_exception
from routemaker.server.routes.org_invitation_models import (
    AcceptInvitationResponse,
    BatchInvitationCreate,
    BatchInvitationResponse,
    InvitationCreate,
    InvitationCreateResponse,
    InvitationDetails,
    InvitationDetailsResponse,
    InvitationFailure,
    InvitationList,
    InvitationResponse,
    SuccessResponse,
)
from routemaker.server.services.email_service import build_invitation_url
from routemaker.server.services.org_invitation_service import OrgInvitationService

invitation_router = APIRouter(prefix='/api/invitations', tags=['invitations'])


def _internal_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
    )


@invitation_router.get(
    '/organization/{organization_id}', response_model=InvitationList
)
async def list_invitations(
    organization_id: UUID,
    identity: UserIdentity = Depends(get_user_identity),
    service: OrgInvitationService = Depends(get_org_invitation_service),
) -> InvitationList:
    """Pending and expired invitations of an organization. Admin or owner only."""
    try:
        invitations = await service.list_invitations(organization_id, identity.user_id)
        return InvitationList(
            invitations=[InvitationResponse.model_validate(i) for i in invitations]
        )
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error listing invitations',
            extra={'org_id': str(organization_id), 'error': str(e)},
        )
        raise _internal_error('Failed to retrieve invitations')


@invitation_router.post('', response_model=InvitationCreateResponse)
async def create_invitation(
    invitation_data: InvitationCreate,
    response: Response,
    identity: UserIdentity = Depends(get_user_identity),
    service: OrgInvitationService = Depends(get_org_invitation_service),
) -> InvitationCreateResponse:
    """Invite an email address to an organization.

    Returns 201 for a new invitation and 200 when the existing pending
    invitation for the same email was re-sent.

    Raises:
        HTTPException: 400 if the role is invalid
        HTTPException: 403 if the caller is not an owner or admin
        HTTPException: 404 if the organization does not exist
        HTTPException: 409 if the email already belongs to a member
    """
    try:
        invitation, created = await service.create_invitation(
            org_id=invitation_data.organization_id,
            email=invitation_data.email,
            role_name=invitation_data.role,
            inviter_id=identity.user_id,
            inviter_email=identity.email,
        )
    except RouteMakerError as e:
        logger.warning(
            'Invitation creation rejected',
            extra={
                'org_id': str(invitation_data.organization_id),
                'user_id': str(identity.user_id),
                'error': str(e),
            },
        )
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error creating invitation',
            extra={
                'org_id': str(invitation_data.organization_id),
                'error': str(e),
            },
        )
        raise _internal_error('Failed to create invitation')

    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return InvitationCreateResponse(
        invitation=InvitationResponse.model_validate(invitation),
        invite_url=build_invitation_url(invitation.token),
    )


@invitation_router.post(
    '/batch',
    response_model=BatchInvitationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_invitations_batch(
    batch_data: BatchInvitationCreate,
    identity: UserIdentity = Depends(get_user_identity),
    service: OrgInvitationService = Depends(get_org_invitation_service),
) -> BatchInvitationResponse:
    """Invite several emails with the same role; failures are reported per email."""
    try:
        successful, failed = await service.create_invitations_batch(
            org_id=batch_data.organization_id,
            emails=[str(email) for email in batch_data.emails],
            role_name=batch_data.role,
            inviter_id=identity.user_id,
            inviter_email=identity.email,
        )
        return BatchInvitationResponse(
            successful=[InvitationResponse.model_validate(i) for i in successful],
            failed=[
                InvitationFailure(email=email, error=error) for email, error in failed
            ],
        )
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error creating batch invitations',
            extra={'org_id': str(batch_data.organization_id), 'error': str(e)},
        )
        raise _internal_error('Failed to create invitations')


@invitation_router.get('/token/{token}', response_model=InvitationDetailsResponse)
async def get_invitation_by_token(
    token: str,
    service: OrgInvitationService = Depends(get_org_invitation_service),
) -> InvitationDetailsResponse:
    """Public lookup used by the accept page; no authentication required."""
    try:
        invitation = await service.get_invitation_by_token(token)
        return InvitationDetailsResponse(
            invitation=InvitationDetails.from_invitation(invitation)
        )
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error fetching invitation',
            extra={'token_prefix': token[:10], 'error': str(e)},
        )
        raise _internal_error('Failed to retrieve invitation')


@invitation_router.post('/accept/{token}', response_model=AcceptInvitationResponse)
async def accept_invitation(
    token: str,
    identity: UserIdentity = Depends(get_user_identity),
    service: OrgInvitationService = Depends(get_org_invitation_service),
) -> AcceptInvitationResponse:
    """Join the invitation's organization as the authenticated user.

    Raises:
        HTTPException: 403 if the caller's email differs from the invitation's
        HTTPException: 404 if the token is unknown
        HTTPException: 409 if the invitation is expired, no longer pending, or
            the caller is already a member
    """
    try:
        org_id = await service.accept_invitation(
            token, identity.user_id, identity.email
        )
        return AcceptInvitationResponse(organization_id=org_id)
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error accepting invitation',
            extra={
                'token_prefix': token[:10],
                'user_id': str(identity.user_id),
                'error': str(e),
            },
        )
        raise _internal_error('Failed to accept invitation')


@invitation_router.delete('/{invitation_id}', response_model=SuccessResponse)
async def revoke_invitation(
    invitation_id: UUID,
    identity: UserIdentity = Depends(get_user_identity),
    service: OrgInvitationService = Depends(get_org_invitation_service),
) -> SuccessResponse:
    try:
        await service.revoke_invitation(invitation_id, identity.user_id)
        return SuccessResponse()
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error revoking invitation',
            extra={'invitation_id': str(invitation_id), 'error': str(e)},
        )
        raise _internal_error('Failed to revoke invitation')
