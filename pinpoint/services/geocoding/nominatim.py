"""
Nominatim (OpenStreetMap) geocoding client.

Blocking requests calls run in a worker thread so the resolver can race this
client against device geolocation on the event loop.
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


class NominatimGeocodingClient:
    def __init__(
        self,
        region: Optional[Region] = None,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout_s: Optional[float] = None,
    ) -> None:
        self.region = region
        self.base_url = (base_url or settings.NOMINATIM_URL).rstrip("/")
        self.user_agent = user_agent or settings.NOMINATIM_USER_AGENT
        self.timeout_s = timeout_s if timeout_s is not None else settings.HTTP_TIMEOUT_S

    def _params(self, query: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {"q": query, "format": "jsonv2", "limit": 1}
        if self.region is not None:
            params["countrycodes"] = self.region.code.lower()
        return params

    def geocode_query(self, query: str) -> Optional[Position]:
        """Blocking lookup of one query string."""
        if not query:
            return None
        try:
            response = requests.get(
                f"{self.base_url}/search",
                params=self._params(query),
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout_s,
            )
            response.raise_for_status()
            results = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"🌍 NOMINATIM ► lookup failed for {query!r}: {e}")
            return None

        if not results:
            logger.info(f"🌍 NOMINATIM ► no result for {query!r}")
            return None
        try:
            return Position(float(results[0]["lat"]), float(results[0]["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"🌍 NOMINATIM ► unparseable result for {query!r}: {e}")
            return None

    async def geocode(self, address: str, city: str, state: str) -> Optional[Position]:
        return await asyncio.to_thread(self.geocode_query, compose_query(address, city, state))
