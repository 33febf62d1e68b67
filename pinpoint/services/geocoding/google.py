"""
Google Geocoding API client, restricted to the deployment region's country.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import requests

from pinpoint.config import settings
from pinpoint.config.regions import Region
from pinpoint.pipelines.location.types import Position
from .base import compose_query

logger = logging.getLogger(__name__)

# Statuses that mean "no answer" rather than a broken request
_EMPTY_STATUSES = {"ZERO_RESULTS"}


class GoogleGeocodingClient:
    BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

    def __init__(
        self,
        region: Optional[Region] = None,
        api_key: Optional[str] = None,
        timeout_s: Optional[float] = None,
    ) -> None:
        self.region = region
        self.api_key = api_key if api_key is not None else settings.GOOGLE_MAPS_API_KEY
        self.timeout_s = timeout_s if timeout_s is not None else settings.HTTP_TIMEOUT_S

    def _params(self, query: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {"address": query, "key": self.api_key}
        if self.region is not None:
            params["components"] = f"country:{self.region.code}"
        return params

    def geocode_query(self, query: str) -> Optional[Position]:
        if not query:
            return None
        if not self.api_key:
            logger.warning("🗺️ GOOGLE GEOCODER ► missing GOOGLE_MAPS_API_KEY, skipping lookup")
            return None
        try:
            response = requests.get(self.BASE_URL, params=self._params(query), timeout=self.timeout_s)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"🗺️ GOOGLE GEOCODER ► lookup failed for {query!r}: {e}")
            return None

        status = payload.get("status")
        if status != "OK":
            if status not in _EMPTY_STATUSES:
                logger.warning(f"🗺️ GOOGLE GEOCODER ► status {status} for {query!r}")
            return None

        results = payload.get("results") or []
        if not results:
            return None
        try:
            location = results[0]["geometry"]["location"]
            return Position(float(location["lat"]), float(location["lng"]))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"🗺️ GOOGLE GEOCODER ► unparseable result for {query!r}: {e}")
            return None

    async def geocode(self, address: str, city: str, state: str) -> Optional[Position]:
        return await asyncio.to_thread(self.geocode_query, compose_query(address, city, state))
