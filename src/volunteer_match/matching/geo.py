"""Great-circle distance between coordinates."""

from __future__ import annotations

import math

from volunteer_match.errors import InvalidCoordinate
from volunteer_match.models import Coordinate

EARTH_RADIUS_KM = 6371.0


def validate_coordinate(coordinate: Coordinate) -> Coordinate:
    if not isinstance(coordinate, Coordinate):
        raise InvalidCoordinate(
            f"expected a Coordinate, got {type(coordinate).__name__}"
        )
    latitude = coordinate.latitude
    longitude = coordinate.longitude
    if not (_is_finite_number(latitude) and _is_finite_number(longitude)):
        raise InvalidCoordinate(f"coordinate must be finite numbers, got {coordinate!r}")
    if not -90.0 <= latitude <= 90.0:
        raise InvalidCoordinate(f"latitude {latitude} outside [-90, 90]")
    if not -180.0 <= longitude <= 180.0:
        raise InvalidCoordinate(f"longitude {longitude} outside [-180, 180]")
    return coordinate


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Haversine distance on a spherical earth (mean radius 6371 km)."""
    validate_coordinate(a)
    validate_coordinate(b)

    # canonical operand order keeps the result bit-identical when swapped
    first, second = sorted(
        ((a.latitude, a.longitude), (b.latitude, b.longitude))
    )
    lat1, lng1 = map(math.radians, first)
    lat2, lng2 = map(math.radians, second)

    d_lat = lat2 - lat1
    d_lng = lng2 - lng1
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    )
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def _is_finite_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
