"""
Geocoding Services
Address and device location sources consumed by the location resolver
"""
from .base import GeocodingClient, GeolocationClient, GeolocationUnavailable, MapRenderer, compose_query
from .device import ReportedFixGeolocationClient, UnavailableGeolocationClient
from .google import GoogleGeocodingClient
from .nominatim import NominatimGeocodingClient
from .registry import get_geocoding_client, iter_providers

__all__ = [
    "GeocodingClient",
    "GeolocationClient",
    "GeolocationUnavailable",
    "MapRenderer",
    "compose_query",
    "ReportedFixGeolocationClient",
    "UnavailableGeolocationClient",
    "GoogleGeocodingClient",
    "NominatimGeocodingClient",
    "get_geocoding_client",
    "iter_providers",
]
