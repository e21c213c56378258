"""
Abstract geocoder interface.

Providers turn a free-form address into coordinates. A provider answers
``None`` when the address cannot be resolved and raises ``GeocodingError``
only when the provider itself cannot be reached.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from routemaker.server.errors import UpstreamError


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


class GeocodingError(UpstreamError):
    default_message = 'Geocoding provider unreachable'


class Geocoder(ABC):
    @abstractmethod
    async def geocode(self, address: str) -> Optional[Coordinates]:
        """
        Resolve an address to coordinates.

        Returns:
            Coordinates of the best match, or None if nothing matched

        Raises:
            GeocodingError: If the provider could not be reached
        """


def build_address(*parts: Optional[str]) -> str:
    """Join the non-empty address fields with ', '."""
    return ', '.join(part.strip() for part in parts if part and part.strip())
