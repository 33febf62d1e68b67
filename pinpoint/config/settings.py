"""
Central configuration for backend settings.

Every value can be overridden from the environment (or a .env file loaded by
main.py before this module is imported).
"""
import os


# Deployment region used for the fallback pin and the out-of-region warning
DEFAULT_REGION: str = os.getenv("PINPOINT_REGION", "CR")

# GPS and geocoded positions further apart than this are flagged for review
CONFLICT_THRESHOLD_KM: float = float(os.getenv("PINPOINT_CONFLICT_THRESHOLD_KM", "1.0"))

# Upper bounds for each live source; a timed-out source counts as unavailable
GEOLOCATION_TIMEOUT_S: float = float(os.getenv("PINPOINT_GEOLOCATION_TIMEOUT_S", "5.0"))
GEOCODING_TIMEOUT_S: float = float(os.getenv("PINPOINT_GEOCODING_TIMEOUT_S", "8.0"))

# Geocoding provider: "nominatim" or "google"
GEOCODER: str = os.getenv("PINPOINT_GEOCODER", "nominatim")

NOMINATIM_URL: str = os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org")
NOMINATIM_USER_AGENT: str = os.getenv("NOMINATIM_USER_AGENT", "Pinpoint/1.0")
GOOGLE_MAPS_API_KEY: str = os.getenv("GOOGLE_MAPS_API_KEY", "")

# HTTP timeout for provider calls (requests), independent of the resolver bound
HTTP_TIMEOUT_S: float = float(os.getenv("PINPOINT_HTTP_TIMEOUT_S", "10.0"))
