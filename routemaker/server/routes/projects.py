from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.auth.user_auth import UserIdentity, get_user_identity
from routemaker.server.dependencies import get_project_service
from routemaker.server.errors import RouteMakerError, to_http_exception
from routemaker.server.routes.resource_models import (
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
)
from routemaker.server.services.project_service import ProjectService

project_router = APIRouter(prefix='/api/projects', tags=['projects'])


def _internal_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
    )


@project_router.get('/organization/{organization_id}')
async def list_projects(
    organization_id: UUID,
    identity: UserIdentity = Depends(get_user_identity),
    service: ProjectService = Depends(get_project_service),
) -> dict:
    try:
        projects = await service.list_for_org(organization_id, identity.user_id)
        return {'projects': [ProjectResponse.model_validate(p) for p in projects]}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error listing projects',
            extra={'org_id': str(organization_id), 'error': str(e)},
        )
        raise _internal_error('Failed to retrieve projects')


@project_router.post('', status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    identity: UserIdentity = Depends(get_user_identity),
    service: ProjectService = Depends(get_project_service),
) -> dict:
    try:
        project = await service.create(
            project_data.organization_id,
            project_data.model_dump(exclude={'organization_id'}),
            identity.user_id,
        )
        return {'project': ProjectResponse.model_validate(project)}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error creating project',
            extra={'org_id': str(project_data.organization_id), 'error': str(e)},
        )
        raise _internal_error('Failed to create project')


@project_router.get('/{project_id}')
async def get_project(
    project_id: UUID,
    identity: UserIdentity = Depends(get_user_identity),
    service: ProjectService = Depends(get_project_service),
) -> dict:
    try:
        project = await service.get(project_id, identity.user_id)
        return {'project': ProjectResponse.model_validate(project)}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error retrieving project',
            extra={'project_id': str(project_id), 'error': str(e)},
        )
        raise _internal_error('Failed to retrieve project')


@project_router.patch('/{project_id}')
async def update_project(
    project_id: UUID,
    update_data: ProjectUpdate,
    identity: UserIdentity = Depends(get_user_identity),
    service: ProjectService = Depends(get_project_service),
) -> dict:
    try:
        project = await service.update(
            project_id, update_data.model_dump(exclude_unset=True), identity.user_id
        )
        return {'project': ProjectResponse.model_validate(project)}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error updating project',
            extra={'project_id': str(project_id), 'error': str(e)},
        )
        raise _internal_error('Failed to update project')


@project_router.delete('/{project_id}')
async def delete_project(
    project_id: UUID,
    identity: UserIdentity = Depends(get_user_identity),
    service: ProjectService = Depends(get_project_service),
) -> dict:
    """Delete a project. Requires admin or owner."""
    try:
        await service.delete(project_id, identity.user_id)
        return {'success': True}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error deleting project',
            extra={'project_id': str(project_id), 'error': str(e)},
        )
        raise _internal_error('Failed to delete project')
