from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.auth.authorization import Permission, require_permission
from routemaker.server.auth.user_auth import UserIdentity, get_user_identity
from routemaker.server.dependencies import get_org_member_service, get_org_service
from routemaker.server.errors import RouteMakerError, to_http_exception
from routemaker.server.routes.org_models import (
    OrgCreate,
    OrgDetailResponse,
    OrgMemberList,
    OrgMemberUpdate,
    OrgResponse,
    OrgUpdate,
    UserOrgList,
    UserOrgSummary,
)
from routemaker.server.services.org_member_service import OrgMemberService
from routemaker.server.services.org_service import OrgService

org_router = APIRouter(prefix='/api/organizations', tags=['organizations'])


def _internal_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
    )


@org_router.get('', response_model=UserOrgList)
async def list_user_orgs(
    identity: UserIdentity = Depends(get_user_identity),
    org_service: OrgService = Depends(get_org_service),
) -> UserOrgList:
    """List the organizations the caller belongs to, with their role in each."""
    try:
        rows = await org_service.list_user_orgs(identity.user_id)
        return UserOrgList(organizations=[UserOrgSummary(**row) for row in rows])
    except Exception as e:
        logger.exception(
            'Unexpected error listing organizations',
            extra={'user_id': str(identity.user_id), 'error': str(e)},
        )
        raise _internal_error('Failed to retrieve organizations')


@org_router.post('', response_model=OrgResponse, status_code=status.HTTP_201_CREATED)
async def create_org(
    org_data: OrgCreate,
    identity: UserIdentity = Depends(get_user_identity),
    org_service: OrgService = Depends(get_org_service),
) -> OrgResponse:
    """Create an organization; the caller becomes its owner."""
    logger.info(
        'Creating organization',
        extra={'user_id': str(identity.user_id), 'org_name': org_data.name},
    )
    try:
        org = await org_service.create_org(org_data.name, identity)
        return OrgResponse.model_validate(org)
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error creating organization',
            extra={'user_id': str(identity.user_id), 'error': str(e)},
        )
        raise _internal_error('Failed to create organization')


@org_router.get('/{org_id}', response_model=OrgDetailResponse)
async def get_org(
    org_id: UUID,
    identity: UserIdentity = Depends(require_permission(Permission.VIEW_ORGANIZATION)),
    org_service: OrgService = Depends(get_org_service),
) -> OrgDetailResponse:
    try:
        org, role = await org_service.get_org(org_id, identity.user_id)
        return OrgDetailResponse(
            organization=OrgResponse.model_validate(org), role=role.value
        )
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error retrieving organization',
            extra={'org_id': str(org_id), 'error': str(e)},
        )
        raise _internal_error('Failed to retrieve organization')


@org_router.patch('/{org_id}', response_model=OrgResponse)
async def update_org(
    org_id: UUID,
    update_data: OrgUpdate,
    identity: UserIdentity = Depends(require_permission(Permission.EDIT_ORGANIZATION)),
    org_service: OrgService = Depends(get_org_service),
) -> OrgResponse:
    """Update name, logo or settings. Requires admin or owner."""
    try:
        org = await org_service.update_org(
            org_id, update_data.model_dump(exclude_unset=True)
        )
        return OrgResponse.model_validate(org)
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error updating organization',
            extra={'org_id': str(org_id), 'error': str(e)},
        )
        raise _internal_error('Failed to update organization')


@org_router.delete('/{org_id}')
async def delete_org(
    org_id: UUID,
    identity: UserIdentity = Depends(
        require_permission(Permission.DELETE_ORGANIZATION)
    ),
    org_service: OrgService = Depends(get_org_service),
) -> dict:
    """Delete an organization and all of its data. Owner only.

    Raises:
        HTTPException: 401 if user is not authenticated
        HTTPException: 403 if user is not an owner
        HTTPException: 404 if organization not found
        HTTPException: 500 if deletion fails
    """
    logger.info(
        'Organization deletion requested',
        extra={'user_id': str(identity.user_id), 'org_id': str(org_id)},
    )
    try:
        await org_service.delete_org(org_id)
        return {'success': True}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error during organization deletion',
            extra={'org_id': str(org_id), 'error': str(e)},
        )
        raise _internal_error('Failed to delete organization')


@org_router.get('/{org_id}/members', response_model=OrgMemberList)
async def list_members(
    org_id: UUID,
    identity: UserIdentity = Depends(require_permission(Permission.VIEW_ORGANIZATION)),
    member_service: OrgMemberService = Depends(get_org_member_service),
) -> OrgMemberList:
    try:
        members = await member_service.list_members(org_id, identity.user_id)
        return OrgMemberList(members=members)
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error listing members',
            extra={'org_id': str(org_id), 'error': str(e)},
        )
        raise _internal_error('Failed to retrieve members')


@org_router.patch('/{org_id}/members/{member_id}')
async def update_member_role(
    org_id: UUID,
    member_id: UUID,
    update_data: OrgMemberUpdate,
    identity: UserIdentity = Depends(require_permission(Permission.MANAGE_MEMBERS)),
    member_service: OrgMemberService = Depends(get_org_member_service),
) -> dict:
    """Change a member's role.

    Raises:
        HTTPException: 400 if the role is invalid
        HTTPException: 403 if the caller may not grant or revoke that role
        HTTPException: 404 if the member is not in the organization
        HTTPException: 409 if the last owner would be demoted
    """
    try:
        member = await member_service.update_member_role(
            org_id, member_id, update_data.role, identity.user_id
        )
        return {'success': True, 'member_id': str(member.id), 'role': member.role}
    except RouteMakerError as e:
        logger.warning(
            'Member role update rejected',
            extra={
                'org_id': str(org_id),
                'member_id': str(member_id),
                'error': str(e),
            },
        )
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error updating member role',
            extra={'org_id': str(org_id), 'member_id': str(member_id), 'error': str(e)},
        )
        raise _internal_error('Failed to update member')


@org_router.delete('/{org_id}/members/{member_id}')
async def remove_member(
    org_id: UUID,
    member_id: UUID,
    identity: UserIdentity = Depends(require_permission(Permission.MANAGE_MEMBERS)),
    member_service: OrgMemberService = Depends(get_org_member_service),
) -> dict:
    try:
        await member_service.remove_member(org_id, member_id, identity.user_id)
        return {'success': True}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error removing member',
            extra={'org_id': str(org_id), 'member_id': str(member_id), 'error': str(e)},
        )
        raise _internal_error('Failed to remove member')


@org_router.post('/{org_id}/leave')
async def leave_org(
    org_id: UUID,
    identity: UserIdentity = Depends(get_user_identity),
    member_service: OrgMemberService = Depends(get_org_member_service),
) -> dict:
    """Leave an organization. The sole owner must transfer ownership first."""
    try:
        await member_service.leave(org_id, identity.user_id)
        return {'success': True}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error leaving organization',
            extra={'org_id': str(org_id), 'error': str(e)},
        )
        raise _internal_error('Failed to leave organization')
