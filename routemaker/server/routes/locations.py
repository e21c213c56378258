from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.auth.user_auth import UserIdentity, get_user_identity
from routemaker.server.dependencies import get_location_service
from routemaker.server.errors import RouteMakerError, to_http_exception
from routemaker.server.routes.resource_models import (
    BulkResult,
    GeocodeBulkRequest,
    LocationCreate,
    LocationImportRequest,
    LocationResponse,
    LocationUpdate,
)
from routemaker.server.services.location_service import LocationService

location_router = APIRouter(prefix='/api/locations', tags=['locations'])


def _internal_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
    )


@location_router.get('/organization/{organization_id}')
async def list_locations(
    organization_id: UUID,
    identity: UserIdentity = Depends(get_user_identity),
    service: LocationService = Depends(get_location_service),
) -> dict:
    try:
        locations = await service.list_for_org(organization_id, identity.user_id)
        return {'locations': [LocationResponse.model_validate(loc) for loc in locations]}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error listing locations',
            extra={'org_id': str(organization_id), 'error': str(e)},
        )
        raise _internal_error('Failed to retrieve locations')


@location_router.post('', status_code=status.HTTP_201_CREATED)
async def create_location(
    location_data: LocationCreate,
    identity: UserIdentity = Depends(get_user_identity),
    service: LocationService = Depends(get_location_service),
) -> dict:
    try:
        values = location_data.model_dump(
            exclude={'organization_id'}, exclude_none=True
        )
        location = await service.create(
            location_data.organization_id, values, identity.user_id
        )
        return {'location': LocationResponse.model_validate(location)}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error creating location',
            extra={'org_id': str(location_data.organization_id), 'error': str(e)},
        )
        raise _internal_error('Failed to create location')


@location_router.post('/import', response_model=BulkResult)
async def import_locations(
    import_data: LocationImportRequest,
    identity: UserIdentity = Depends(get_user_identity),
    service: LocationService = Depends(get_location_service),
) -> BulkResult:
    """Insert parsed CSV rows; invalid rows are reported with 1-based row numbers."""
    try:
        result = await service.import_locations(
            import_data.organization_id, import_data.locations, identity.user_id
        )
        return BulkResult(**result)
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error importing locations',
            extra={'org_id': str(import_data.organization_id), 'error': str(e)},
        )
        raise _internal_error('Failed to import locations')


@location_router.post('/geocode-bulk', response_model=BulkResult)
async def geocode_bulk(
    request: GeocodeBulkRequest,
    identity: UserIdentity = Depends(get_user_identity),
    service: LocationService = Depends(get_location_service),
) -> BulkResult:
    try:
        result = await service.geocode_bulk(request.location_ids, identity.user_id)
        return BulkResult(**result)
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error geocoding locations',
            extra={'count': len(request.location_ids), 'error': str(e)},
        )
        raise _internal_error('Failed to geocode locations')


@location_router.get('/{location_id}')
async def get_location(
    location_id: UUID,
    identity: UserIdentity = Depends(get_user_identity),
    service: LocationService = Depends(get_location_service),
) -> dict:
    try:
        location = await service.get(location_id, identity.user_id)
        return {'location': LocationResponse.model_validate(location)}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error retrieving location',
            extra={'location_id': str(location_id), 'error': str(e)},
        )
        raise _internal_error('Failed to retrieve location')


@location_router.put('/{location_id}')
async def update_location(
    location_id: UUID,
    update_data: LocationUpdate,
    identity: UserIdentity = Depends(get_user_identity),
    service: LocationService = Depends(get_location_service),
) -> dict:
    try:
        location = await service.update(
            location_id, update_data.model_dump(exclude_unset=True), identity.user_id
        )
        return {'location': LocationResponse.model_validate(location)}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error updating location',
            extra={'location_id': str(location_id), 'error': str(e)},
        )
        raise _internal_error('Failed to update location')


@location_router.delete('/{location_id}')
async def delete_location(
    location_id: UUID,
    identity: UserIdentity = Depends(get_user_identity),
    service: LocationService = Depends(get_location_service),
) -> dict:
    try:
        await service.delete(location_id, identity.user_id)
        return {'success': True}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error deleting location',
            extra={'location_id': str(location_id), 'error': str(e)},
        )
        raise _internal_error('Failed to delete location')


@location_router.post('/{location_id}/geocode')
async def geocode_location(
    location_id: UUID,
    identity: UserIdentity = Depends(get_user_identity),
    service: LocationService = Depends(get_location_service),
) -> dict:
    """Geocode one location and store its coordinates.

    Raises:
        HTTPException: 400 if the address could not be geocoded
        HTTPException: 403 if the caller is not a member of its organization
        HTTPException: 404 if the location does not exist
        HTTPException: 502 if the geocoding provider is unreachable
    """
    try:
        location = await service.geocode_one(location_id, identity.user_id)
        return {'location': LocationResponse.model_validate(location)}
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error geocoding location',
            extra={'location_id': str(location_id), 'error': str(e)},
        )
        raise _internal_error('Failed to geocode location')
