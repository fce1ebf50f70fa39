"""Nearest scheduled stops for a reference point on a given day."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

import numpy as np

from ...models.domain import Coordinate, Stop
from .models import NearbyStop


def find_nearby(
    reference: Coordinate,
    target_date: date,
    stops: Iterable[Stop],
    *,
    exclude_stop_id: Optional[str] = None,
    limit: int = 5,
) -> list[NearbyStop]:
    """Return up to ``limit`` stops on ``target_date`` ranked by planar distance.

    Stops across all technicians are considered. The inspected stop is removed
    by identifier, never by coordinate, so two stops at one address both stay
    eligible. Equal distances keep their input order.
    """
    candidates = [
        stop
        for stop in stops
        if stop.date == target_date and stop.coordinate is not None and stop.id != exclude_stop_id
    ]
    if not candidates or limit <= 0:
        return []

    latitudes = np.fromiter((stop.latitude for stop in candidates), dtype=float, count=len(candidates))
    longitudes = np.fromiter((stop.longitude for stop in candidates), dtype=float, count=len(candidates))
    distances = np.sqrt((latitudes - reference.latitude) ** 2 + (longitudes - reference.longitude) ** 2)

    ranked = np.argsort(distances, kind="stable")[:limit]
    return [NearbyStop(stop_id=candidates[idx].id, distance=float(distances[idx])) for idx in ranked]
