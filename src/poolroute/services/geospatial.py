"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Iterable, Optional

from ..models.domain import Coordinate


def planar_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Euclidean distance treating degrees of latitude and longitude as Cartesian units.

    Only used as an ordering key. Not geodesic: east-west separation is
    overstated at higher latitudes, and route orderings depend on that.
    NaN inputs propagate to a NaN result.
    """

    return math.sqrt((lat1 - lat2) ** 2 + (lon1 - lon2) ** 2)


def coordinate_distance(a: Coordinate, b: Coordinate) -> float:
    return planar_distance(a.latitude, a.longitude, b.latitude, b.longitude)


def path_length(start: Optional[Coordinate], points: Iterable[Coordinate]) -> float:
    """Sum of planar distances along ``start`` followed by ``points`` in order."""

    total = 0.0
    previous = start
    for point in points:
        if previous is not None:
            total += coordinate_distance(previous, point)
        previous = point
    return total
