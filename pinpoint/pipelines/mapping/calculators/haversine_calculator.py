"""
Haversine Calculator Module
Great-circle distances on a spherical Earth for comparing location sources
"""
import math
import logging
from typing import Dict

from pinpoint.pipelines.location.types import Position

logger = logging.getLogger(__name__)

# Metres per unit
_UNIT_SCALE: Dict[str, float] = {
    "meters": 1.0,
    "kilometers": 1000.0,
    "feet": 0.3048,
    "miles": 1609.344,
}


class HaversineCalculator:
    """
    Spherical distance and bearing.
    Well under 0.5% error for the metres-to-tens-of-km gaps the resolver compares.
    """

    EARTH_RADIUS_KM = 6371.0

    @staticmethod
    def central_angle(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
        """Angle in radians subtended at the Earth's centre."""
        phi1, phi2 = math.radians(lat1), math.radians(lat2)
        half_dphi = (phi2 - phi1) / 2
        half_dlambda = math.radians(lng2 - lng1) / 2

        h = math.sin(half_dphi) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(half_dlambda) ** 2
        # Rounding can push h a hair past 1 for antipodal points
        return 2 * math.asin(math.sqrt(min(1.0, h)))

    @staticmethod
    def distance_km(a: Position, b: Position) -> float:
        """
        Great-circle distance between two positions in kilometres.

        Symmetric, zero for identical positions, grows with angular separation.
        """
        return HaversineCalculator.EARTH_RADIUS_KM * HaversineCalculator.central_angle(a.lat, a.lng, b.lat, b.lng)

    @staticmethod
    def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float, units: str = "meters") -> float:
        """
        Distance in "meters", "kilometers", "feet" or "miles".

        Raises:
            ValueError: unknown units
        """
        scale = _UNIT_SCALE.get(units)
        if scale is None:
            raise ValueError(f"Unknown distance units: {units} (expected one of {', '.join(_UNIT_SCALE)})")
        meters = HaversineCalculator.EARTH_RADIUS_KM * 1000.0 * HaversineCalculator.central_angle(lat1, lng1, lat2, lng2)
        return meters / scale

    @staticmethod
    def calculate_bearing(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
        """Initial bearing from point 1 to point 2, degrees clockwise from north in [0, 360)."""
        phi1, phi2 = math.radians(lat1), math.radians(lat2)
        dlambda = math.radians(lng2 - lng1)

        y = math.sin(dlambda) * math.cos(phi2)
        x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlambda)
        return math.degrees(math.atan2(y, x)) % 360.0


def distance_km(a: Position, b: Position) -> float:
    return HaversineCalculator.distance_km(a, b)
