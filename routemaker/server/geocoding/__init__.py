import os

from routemaker.server.constants import GEOCODING_PROVIDER
from routemaker.server.geocoding.base import (
    Coordinates,
    Geocoder,
    GeocodingError,
    build_address,
)
from routemaker.server.geocoding.google import GoogleGeocoder
from routemaker.server.geocoding.opencage import OpenCageGeocoder

GEOCODERS: dict[str, type[Geocoder]] = {
    'opencage': OpenCageGeocoder,
    'google': GoogleGeocoder,
}


def create_geocoder(provider: str, api_key: str) -> Geocoder:
    geocoder_cls = GEOCODERS.get(provider.lower())
    if geocoder_cls is None:
        raise ValueError(f'Unsupported geocoding provider: {provider}')
    return geocoder_cls(api_key)


def get_geocoder() -> Geocoder:
    """Build the geocoder configured by GEOCODING_PROVIDER and GEOCODING_API_KEY."""
    api_key = os.environ.get('GEOCODING_API_KEY')
    if not api_key:
        raise GeocodingError('GEOCODING_API_KEY environment variable is required')
    return create_geocoder(GEOCODING_PROVIDER, api_key)


__all__ = [
    'Coordinates',
    'Geocoder',
    'GeocodingError',
    'GoogleGeocoder',
    'OpenCageGeocoder',
    'build_address',
    'create_geocoder',
    'get_geocoder',
]
