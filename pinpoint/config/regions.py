"""
Supported deployment regions.

Each region carries the bounding box used for the out-of-region warning and
the centre used as the fallback pin when no source resolves.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from pinpoint.config import settings


@dataclass(frozen=True)
class Region:
    code: str
    name: str
    north: float
    south: float
    east: float
    west: float
    center: Tuple[float, float]  # (lat, lng)

    def contains(self, lat: float, lng: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lng <= self.east

    def to_dict(self) -> Dict[str, object]:
        return {
            "code": self.code,
            "name": self.name,
            "bounds": {
                "north": self.north,
                "south": self.south,
                "east": self.east,
                "west": self.west,
            },
            "center": {"lat": self.center[0], "lng": self.center[1]},
        }


SUPPORTED_REGIONS: Dict[str, Region] = {
    "CR": Region("CR", "Costa Rica", north=11.5, south=8.0, east=-82.5, west=-86.0,
                 center=(9.7489, -83.7534)),
    "PA": Region("PA", "Panamá", north=9.8, south=7.2, east=-77.2, west=-83.0,
                 center=(8.9824, -79.5199)),
    "DO": Region("DO", "República Dominicana", north=20.0, south=17.5, east=-68.3, west=-72.0,
                 center=(18.7357, -70.1627)),
}


def get_region(code: Optional[str] = None) -> Region:
    """Look up a region by ISO code; None means the configured default.

    Raises:
        KeyError: unknown region code
    """
    key = (code or settings.DEFAULT_REGION).strip().upper()
    if key not in SUPPORTED_REGIONS:
        raise KeyError(f"Unsupported region: {key}")
    return SUPPORTED_REGIONS[key]


def iter_regions() -> Iterator[Region]:
    yield from SUPPORTED_REGIONS.values()
