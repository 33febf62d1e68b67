"""Central geocoding provider registry: internal IDs, display names, factories."""
from __future__ import annotations

from typing import Callable, Dict, Iterator, Optional, Tuple

from pinpoint.config import settings
from pinpoint.config.regions import Region, get_region
from .base import GeocodingClient
from .google import GoogleGeocodingClient
from .nominatim import NominatimGeocodingClient

# Ordered list of (internal_id, display_name)
PROVIDERS = [
    ("nominatim", "Nominatim (OpenStreetMap)"),
    ("google", "Google Geocoding"),
]

_FACTORIES: Dict[str, Callable[[Region], GeocodingClient]] = {
    "nominatim": lambda region: NominatimGeocodingClient(region=region),
    "google": lambda region: GoogleGeocodingClient(region=region),
}


def iter_providers() -> Iterator[Tuple[str, str]]:
    """Yield (internal_id, display_name) preserving order."""
    yield from PROVIDERS


def get_geocoding_client(provider: Optional[str] = None, region: Optional[Region] = None) -> GeocodingClient:
    """
    Build the configured geocoding client.

    Raises:
        KeyError: unknown provider id
    """
    key = (provider or settings.GEOCODER).strip().lower()
    if key not in _FACTORIES:
        raise KeyError(f"Unknown geocoding provider: {key}")
    return _FACTORIES[key](region or get_region())
