from __future__ import annotations

import math
import random

import pytest

from pinpoint.pipelines.location.types import Position

from .haversine_calculator import HaversineCalculator, distance_km


def test_distance_is_zero_for_identical_points() -> None:
    p = Position(9.9, -84.0)
    assert distance_km(p, p) == 0.0


def test_distance_is_symmetric() -> None:
    rng = random.Random(3)
    for _ in range(1000):
        a = Position(rng.uniform(-90, 90), rng.uniform(-180, 180))
        b = Position(rng.uniform(-90, 90), rng.uniform(-180, 180))
        assert distance_km(a, b) == distance_km(b, a)


def test_one_degree_of_latitude() -> None:
    assert distance_km(Position(0.0, 0.0), Position(1.0, 0.0)) == pytest.approx(111.195, abs=0.001)


def test_antipodal_points_are_half_the_circumference() -> None:
    d = distance_km(Position(0.0, 0.0), Position(0.0, 180.0))
    assert d == pytest.approx(math.pi * HaversineCalculator.EARTH_RADIUS_KM)


def test_gps_and_address_several_km_apart() -> None:
    d = distance_km(Position(9.9, -84.0), Position(9.95, -84.05))
    assert 7.5 < d < 8.1


def test_distance_grows_with_separation() -> None:
    origin = Position(9.9, -84.0)
    previous = 0.0
    for step in range(1, 20):
        d = distance_km(origin, Position(9.9 + step * 0.01, -84.0))
        assert d > previous
        previous = d


@pytest.mark.parametrize(
    "units,expected",
    [("meters", 111194.93), ("kilometers", 111.19493), ("feet", 364812.3), ("miles", 69.0934)],
)
def test_calculate_distance_units(units: str, expected: float) -> None:
    assert HaversineCalculator.calculate_distance(0, 0, 1, 0, units) == pytest.approx(expected, rel=1e-4)


def test_calculate_distance_rejects_unknown_units() -> None:
    with pytest.raises(ValueError):
        HaversineCalculator.calculate_distance(0, 0, 1, 0, "furlongs")


@pytest.mark.parametrize(
    "target,bearing",
    [((1.0, 0.0), 0.0), ((0.0, 1.0), 90.0), ((-1.0, 0.0), 180.0), ((0.0, -1.0), 270.0)],
)
def test_bearing_cardinal_directions(target, bearing: float) -> None:
    assert HaversineCalculator.calculate_bearing(0.0, 0.0, *target) == pytest.approx(bearing)
