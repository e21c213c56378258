from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.auth.user_auth import UserIdentity, get_user_identity
from routemaker.server.dependencies import get_technician_service
from routemaker.server.errors import RouteMakerError, to_http_exception
from routemaker.server.routes.resource_models import (
    EmploymentType,
    TechnicianCreate,
    TechnicianPage,
    TechnicianResponse,
    TechnicianUpdate,
)
from routemaker.server.services.technician_service import TechnicianService

technician_router = APIRouter(prefix='/api/technicians', tags=['technicians'])


def _internal_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
    )


@technician_router.get(
    '/organization/{organization_id}', response_model=TechnicianPage
)
async def list_technicians(
    organization_id: UUID,
    search: str | None = None,
    employment_type: EmploymentType | None = None,
    active: bool | None = None,
    sort_by: str = 'full_name',
    sort_dir: Literal['asc', 'desc'] = 'asc',
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=25, ge=1, le=100),
    identity: UserIdentity = Depends(get_user_identity),
    service: TechnicianService = Depends(get_technician_service),
) -> TechnicianPage:
    """Filtered, sorted and paginated technicians of an organization."""
    try:
        result = await service.list_page(
            organization_id,
            identity.user_id,
            search=search,
            employment_type=employment_type,
            active=active,
            sort_by=sort_by,
            sort_desc=sort_dir == 'desc',
            page=page,
            page_size=page_size,
        )
        return TechnicianPage(
            data=[TechnicianResponse.model_validate(t) for t in result['data']],
            count=result['count'],
            page=result['page'],
            page_size=result['page_size'],
            total_pages=result['total_pages'],
        )
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error listing technicians',
            extra={'org_id': str(organization_id), 'error': str(e)},
        )
        raise _internal_error('Failed to retrieve technicians')


@technician_router.post('', status_code=status.HTTP_201_CREATED)
async def create_technician(
    technician_data: TechnicianCreate,
    identity: UserIdentity = Depends(get_user_identity),
    service: TechnicianService = Depends(get_technician_service),
) -> dict:
    try:
        technician = await service.create(
            technician_data.organization_id,
            technician_data.model_dump(exclude={'organization_id'}),
            identity.user_id,
        )
        return {'technician': TechnicianResponse.model_validate(technician)}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error creating technician',
            extra={'org_id': str(technician_data.organization_id), 'error': str(e)},
        )
        raise _internal_error('Failed to create technician')


@technician_router.get('/{technician_id}')
async def get_technician(
    technician_id: UUID,
    identity: UserIdentity = Depends(get_user_identity),
    service: TechnicianService = Depends(get_technician_service),
) -> dict:
    try:
        technician = await service.get(technician_id, identity.user_id)
        return {'technician': TechnicianResponse.model_validate(technician)}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error retrieving technician',
            extra={'technician_id': str(technician_id), 'error': str(e)},
        )
        raise _internal_error('Failed to retrieve technician')


@technician_router.patch('/{technician_id}')
async def update_technician(
    technician_id: UUID,
    update_data: TechnicianUpdate,
    identity: UserIdentity = Depends(get_user_identity),
    service: TechnicianService = Depends(get_technician_service),
) -> dict:
    try:
        technician = await service.update(
            technician_id,
            update_data.model_dump(exclude_unset=True),
            identity.user_id,
        )
        return {'technician': TechnicianResponse.model_validate(technician)}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error updating technician',
            extra={'technician_id': str(technician_id), 'error': str(e)},
        )
        raise _internal_error('Failed to update technician')


@technician_router.delete('/{technician_id}')
async def delete_technician(
    technician_id: UUID,
    identity: UserIdentity = Depends(get_user_identity),
    service: TechnicianService = Depends(get_technician_service),
) -> dict:
    try:
        await service.delete(technician_id, identity.user_id)
        return {'success': True}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error deleting technician',
            extra={'technician_id': str(technician_id), 'error': str(e)},
        )
        raise _internal_error('Failed to delete technician')
