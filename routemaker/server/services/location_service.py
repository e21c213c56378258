"""Locations: CRUD plus bulk import and geocoding."""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.auth.authorization import AuthorizationResult, RoleName
from routemaker.server.constants import GEOCODE_CONCURRENCY
from routemaker.server.errors import ForbiddenError, NotFoundError, ValidationError
from routemaker.server.geocoding import (
    Coordinates,
    Geocoder,
    GeocodingError,
    build_address,
    get_geocoder,
)
from routemaker.server.services.tenant_resource_service import TenantResourceService
from routemaker.storage.location import LOCATION_TYPES, Location

REQUIRED_IMPORT_FIELDS = (
    'name',
    'type',
    'address_line1',
    'city',
    'state',
    'postal_code',
)

COULD_NOT_GEOCODE = 'Could not geocode address'


def location_address(location: Location) -> str:
    return build_address(
        location.address_line1,
        location.address_line2,
        location.city,
        location.state,
        location.postal_code,
        location.country,
    )


def validate_import_row(row: dict[str, Any]) -> Optional[str]:
    """Return the error message for an invalid import row, or None."""
    for key in REQUIRED_IMPORT_FIELDS:
        value = row.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            return 'Missing required fields'
    if row['type'] not in LOCATION_TYPES:
        return 'Invalid type. Must be "residential" or "commercial"'
    return None


@dataclass
class LocationService(TenantResourceService[Location]):
    geocoder_factory: Callable[[], Geocoder] = field(default=get_geocoder)
    concurrency: int = GEOCODE_CONCURRENCY

    resource_name: ClassVar[str] = 'Location'

    async def import_locations(
        self, org_id: UUID, rows: list[dict[str, Any]], user_id: UUID
    ) -> dict[str, Any]:
        """Insert already-parsed rows one by one.

        A bad row is recorded and skipped; errors report 1-based row numbers.

        Returns:
            {success, failed, errors: [{row, error, data}]}
        """
        await self._authorize(user_id, org_id)

        success = 0
        errors: list[dict[str, Any]] = []
        for index, row in enumerate(rows):
            message = validate_import_row(row)
            if message is None:
                values = {
                    key: value
                    for key, value in row.items()
                    if key not in ('id', 'organization_id')
                }
                values.setdefault('is_active', True)
                if not values.get('country'):
                    values['country'] = 'US'
                try:
                    await self.store.create(org_id, values)
                    success += 1
                    continue
                except SQLAlchemyError as e:
                    message = str(e.orig) if getattr(e, 'orig', None) else str(e)
            errors.append({'row': index + 1, 'error': message, 'data': row})

        logger.info(
            'Imported locations',
            extra={
                'org_id': str(org_id),
                'success': success,
                'failed': len(errors),
            },
        )
        return {'success': success, 'failed': len(errors), 'errors': errors}

    async def _geocode_all(
        self, geocoder: Geocoder, locations: list[Location]
    ) -> list[Coordinates | None | Exception]:
        semaphore = asyncio.Semaphore(max(1, self.concurrency))

        async def geocode_one(location: Location):
            async with semaphore:
                try:
                    return await geocoder.geocode(location_address(location))
                except GeocodingError as e:
                    return e
                except Exception as e:
                    logger.exception(
                        'Geocoding failed',
                        extra={'location_id': str(location.id)},
                    )
                    return e

        # gather keeps input order
        return await asyncio.gather(*[geocode_one(loc) for loc in locations])

    async def geocode_bulk(
        self, location_ids: list[UUID], user_id: UUID
    ) -> dict[str, Any]:
        """Geocode several locations; each failure is recorded against its id.

        Raises:
            ForbiddenError: If the caller is not a member of every organization
                the found locations belong to
        """
        found = {loc.id: loc for loc in await self.store.get_many(location_ids)}

        for org_id in {loc.organization_id for loc in found.values()}:
            result = await self.authority.check_role(user_id, org_id, RoleName.MEMBER)
            if result != AuthorizationResult.OK:
                raise ForbiddenError('Access denied to one or more locations')

        locations = list(found.values())
        outcomes = {}
        if locations:
            results = await self._geocode_all(self.geocoder_factory(), locations)
            outcomes = dict(zip([loc.id for loc in locations], results))

        success = 0
        errors: list[dict[str, Any]] = []
        for location_id in location_ids:
            if location_id not in found:
                errors.append({'id': str(location_id), 'error': 'Location not found'})
                continue
            outcome = outcomes[location_id]
            if isinstance(outcome, Exception):
                errors.append({'id': str(location_id), 'error': str(outcome)})
                continue
            if outcome is None:
                errors.append({'id': str(location_id), 'error': COULD_NOT_GEOCODE})
                continue
            try:
                updated = await self.store.update(
                    found[location_id].organization_id,
                    location_id,
                    {'latitude': outcome.lat, 'longitude': outcome.lng},
                )
            except Exception as e:
                logger.exception(
                    'Failed to save coordinates',
                    extra={'location_id': str(location_id)},
                )
                errors.append({'id': str(location_id), 'error': str(e)})
                continue
            if not updated:
                errors.append({'id': str(location_id), 'error': 'Location not found'})
                continue
            success += 1

        logger.info(
            'Bulk geocoding finished',
            extra={'requested': len(location_ids), 'success': success},
        )
        return {'success': success, 'failed': len(errors), 'errors': errors}

    async def geocode_one(self, location_id: UUID, user_id: UUID) -> Location:
        """
        Raises:
            NotFoundError: If the location does not exist
            ForbiddenError: If the caller is not a member of its organization
            ValidationError: If the address could not be geocoded
            GeocodingError: If the provider could not be reached
        """
        location = await self._load(location_id, user_id)
        coordinates = await self.geocoder_factory().geocode(location_address(location))
        if coordinates is None:
            raise ValidationError(COULD_NOT_GEOCODE)

        updated = await self.store.update(
            location.organization_id,
            location_id,
            {'latitude': coordinates.lat, 'longitude': coordinates.lng},
        )
        if not updated:
            raise NotFoundError('Location not found')
        return updated
