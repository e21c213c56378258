from typing import Optional

import httpx

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.constants import GEOCODE_REQUEST_TIMEOUT_SECONDS
from routemaker.server.geocoding.base import Coordinates, Geocoder, GeocodingError

GOOGLE_GEOCODE_URL = 'https://maps.googleapis.com/maps/api/geocode/json'


class GoogleGeocoder(Geocoder):
    def __init__(self, api_key: str, base_url: str = GOOGLE_GEOCODE_URL) -> None:
        self.api_key = api_key
        self.base_url = base_url

    async def geocode(self, address: str) -> Optional[Coordinates]:
        try:
            async with httpx.AsyncClient(
                timeout=GEOCODE_REQUEST_TIMEOUT_SECONDS
            ) as client:
                response = await client.get(
                    self.base_url, params={'address': address, 'key': self.api_key}
                )
        except httpx.RequestError as e:
            raise GeocodingError(f'Google geocoding request failed: {e}') from e

        if response.status_code != 200:
            logger.error(
                'Google Geocoding API error',
                extra={'status_code': response.status_code},
            )
            return None

        try:
            data = response.json()
        except ValueError as e:
            raise GeocodingError('Google geocoding returned an invalid response') from e
        if not isinstance(data, dict):
            raise GeocodingError('Google geocoding returned an invalid response')
        if data.get('status') != 'OK':
            # ZERO_RESULTS lands here too
            logger.error(
                'Google Geocoding error',
                extra={
                    'provider_status': data.get('status'),
                    'provider_message': data.get('error_message'),
                },
            )
            return None

        results = data.get('results') or []
        if not results:
            logger.warning('No geocoding results for address')
            return None

        try:
            location = results[0]['geometry']['location']
            return Coordinates(lat=float(location['lat']), lng=float(location['lng']))
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodingError('Google geocoding returned an invalid response') from e
