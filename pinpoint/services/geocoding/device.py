"""
Device geolocation adapters.

The backend never reads GPS hardware itself: the browser or mobile client
reports the fix it obtained (or the reason it could not get one) and these
adapters replay it through the GeolocationClient protocol.
"""
from __future__ import annotations

import logging
from typing import Optional

from pinpoint.pipelines.location.types import Position
from .base import GeolocationUnavailable

logger = logging.getLogger(__name__)


class ReportedFixGeolocationClient:
    """Serves a fix reported by the client device, once per request."""

    def __init__(self, position: Optional[Position] = None, error: Optional[str] = None) -> None:
        self.position = position
        self.error = error

    async def get_current_position(self, timeout_ms: int) -> Optional[Position]:
        if self.error:
            raise GeolocationUnavailable(self.error)
        if self.position is None:
            raise GeolocationUnavailable("no fix reported")
        return self.position


class UnavailableGeolocationClient:
    """For contexts with no device at all (batch jobs, server-side previews)."""

    async def get_current_position(self, timeout_ms: int) -> Optional[Position]:
        raise GeolocationUnavailable("no device")
