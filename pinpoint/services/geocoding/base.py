"""
Location source interfaces.

The resolver only talks to these protocols; concrete providers (Nominatim,
Google, device fixes reported by a browser) live next to this module.
"""
from __future__ import annotations

from typing import Optional, Protocol

from pinpoint.pipelines.location.types import Position


class GeolocationUnavailable(Exception):
    """Device location could not be obtained (denied, timed out, no hardware)."""

    def __init__(self, reason: str = "unavailable"):
        super().__init__(reason)
        self.reason = reason


class GeocodingClient(Protocol):
    async def geocode(self, address: str, city: str, state: str) -> Optional[Position]:
        """Resolve a free-text address; None when nothing was found."""
        ...


class GeolocationClient(Protocol):
    async def get_current_position(self, timeout_ms: int) -> Optional[Position]:
        """Current device position; None or GeolocationUnavailable when unavailable."""
        ...


class MapRenderer(Protocol):
    """Map widget capability; reports clicks and drags back to the editor."""

    def render(self, position: Position) -> None: ...


def compose_query(address: str, city: str, state: str) -> str:
    """Join the non-blank address parts as "address, city, state"."""
    parts = [(p or "").strip() for p in (address, city, state)]
    return ", ".join(p for p in parts if p)
