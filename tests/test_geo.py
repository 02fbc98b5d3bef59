from __future__ import annotations

import math

import pytest

from volunteer_match.errors import InvalidArgument, InvalidCoordinate
from volunteer_match.matching.geo import distance_km
from volunteer_match.models import Coordinate

SAO_PAULO = Coordinate(-23.5505, -46.6333)
RIO = Coordinate(-22.9068, -43.1729)


def test_distance_between_known_cities() -> None:
    distance = distance_km(SAO_PAULO, RIO)

    assert 350 < distance < 365


def test_distance_is_symmetric() -> None:
    pairs = [
        (SAO_PAULO, RIO),
        (Coordinate(0, 0), Coordinate(0, 180)),
        (Coordinate(90, 0), Coordinate(-90, 0)),
        (Coordinate(51.5007, -0.1246), Coordinate(40.6892, -74.0445)),
        (Coordinate(-33.8568, 151.2153), Coordinate(35.6586, 139.7454)),
    ]

    for a, b in pairs:
        assert distance_km(a, b) == distance_km(b, a)


def test_distance_to_self_is_zero() -> None:
    for point in (SAO_PAULO, RIO, Coordinate(90, 180), Coordinate(-90, -180)):
        assert distance_km(point, point) < 1e-6


def test_antipodal_points_do_not_produce_nan() -> None:
    distance = distance_km(Coordinate(0, 0), Coordinate(0, 180))

    assert not math.isnan(distance)
    assert distance == pytest.approx(math.pi * 6371.0)


@pytest.mark.parametrize(
    "coordinate",
    [
        Coordinate(90.5, 0),
        Coordinate(-91, 0),
        Coordinate(0, 180.01),
        Coordinate(0, -200),
        Coordinate(float("nan"), 0),
    ],
)
def test_invalid_coordinates_raise(coordinate: Coordinate) -> None:
    with pytest.raises(InvalidCoordinate):
        distance_km(coordinate, SAO_PAULO)


def test_invalid_coordinate_is_an_invalid_argument() -> None:
    with pytest.raises(InvalidArgument):
        distance_km(SAO_PAULO, Coordinate(0, 999))


def test_non_coordinate_operand_raises() -> None:
    with pytest.raises(InvalidCoordinate):
        distance_km((-23.5505, -46.6333), SAO_PAULO)  # type: ignore[arg-type]
