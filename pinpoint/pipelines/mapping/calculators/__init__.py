"""
Mapping Calculators
"""
from .haversine_calculator import HaversineCalculator, distance_km

__all__ = ["HaversineCalculator", "distance_km"]
