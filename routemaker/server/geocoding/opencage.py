from typing import Optional

import httpx

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.constants import GEOCODE_REQUEST_TIMEOUT_SECONDS
from routemaker.server.geocoding.base import Coordinates, Geocoder, GeocodingError

OPENCAGE_URL = 'https://api.opencagedata.com/geocode/v1/json'


class OpenCageGeocoder(Geocoder):
    def __init__(self, api_key: str, base_url: str = OPENCAGE_URL) -> None:
        self.api_key = api_key
        self.base_url = base_url

    async def geocode(self, address: str) -> Optional[Coordinates]:
        params = {
            'q': address,
            'key': self.api_key,
            'limit': '1',
            'no_annotations': '1',
        }
        try:
            async with httpx.AsyncClient(
                timeout=GEOCODE_REQUEST_TIMEOUT_SECONDS
            ) as client:
                response = await client.get(self.base_url, params=params)
        except httpx.RequestError as e:
            raise GeocodingError(f'OpenCage request failed: {e}') from e

        if response.status_code != 200:
            logger.error(
                'OpenCage API error',
                extra={'status_code': response.status_code},
            )
            return None

        try:
            data = response.json()
        except ValueError as e:
            raise GeocodingError('OpenCage returned an invalid response') from e
        if not isinstance(data, dict):
            raise GeocodingError('OpenCage returned an invalid response')
        status = data.get('status') or {}
        if status.get('code') != 200:
            logger.error(
                'OpenCage error', extra={'provider_message': status.get('message')}
            )
            return None

        results = data.get('results') or []
        if not results:
            logger.warning('No geocoding results for address')
            return None

        try:
            geometry = results[0]['geometry']
            return Coordinates(lat=float(geometry['lat']), lng=float(geometry['lng']))
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodingError('OpenCage returned an invalid response') from e
