"""Greedy nearest-neighbour sequencing for a single route.

The walk starts at an anchor coordinate and repeatedly visits the closest stop
that has not been given an order yet. Distances use the planar metric from
:mod:`..geospatial`, so orderings match what the scheduling dashboard has
always shown.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ...config import settings
from ...models.domain import Coordinate, Stop
from ..geospatial import coordinate_distance, path_length
from .models import SequenceResult, SequenceStatus


def default_anchor(stops: Sequence[Stop]) -> Optional[Coordinate]:
    """Coordinate of the lowest-ordered stop, or of the first unordered stop in list order."""

    candidates = [stop for stop in stops if stop.coordinate is not None]
    if not candidates:
        return None
    ordered = [stop for stop in candidates if stop.order is not None]
    if ordered:
        first = min(ordered, key=lambda stop: stop.order)
    else:
        first = candidates[0]
    return first.coordinate


def _nearest(current: Coordinate, pending: Sequence[Stop]) -> Stop:
    # Equidistant candidates resolve to the lower stop id.
    return min(pending, key=lambda stop: (coordinate_distance(current, stop.coordinate), stop.id))


def sequence_route(
    stops: Sequence[Stop],
    anchor: Optional[Coordinate] = None,
    *,
    route_id: Optional[str] = None,
    order_base: Optional[int] = None,
) -> SequenceResult:
    """Assign a visiting order to every unordered, coordinate-bearing stop.

    Stops that already carry an order keep their relative position and are
    renumbered only to close gaps. The walk then continues from the
    highest-ordered stop, so each new order is measured from the stop before
    it. Every changed ``order`` is written in place and reported in
    ``SequenceResult.assignments``. Orders on stops without coordinates are
    left as they are.

    Args:
        stops: All stops of one route.
        anchor: Starting position (technician home/depot) for a route with no
            ordered stops. When omitted the lowest-ordered stop is used, or
            the first stop in list order when nothing is ordered yet.
        route_id: Identifier carried through to the result.
        order_base: First order value for a route with no ordered stops
            (defaults to settings).

    Returns:
        SequenceResult with the full visiting order of the route's
        coordinate-bearing stops. A route without such stops yields
        ``SequenceStatus.NOTHING_TO_SEQUENCE`` and leaves every order untouched.
    """
    base = settings.order_base if order_base is None else order_base

    sequenceable = [stop for stop in stops if stop.coordinate is not None]
    unsequenceable = [stop.id for stop in stops if stop.coordinate is None]

    start = anchor if anchor is not None else default_anchor(sequenceable)
    if not sequenceable or start is None:
        logging.warning(f"Route {route_id}: nothing to sequence ({len(unsequenceable)} stops without coordinates)")
        return SequenceResult(
            route_id=route_id,
            status=SequenceStatus.NOTHING_TO_SEQUENCE,
            ordered_stop_ids=[],
            unsequenceable=unsequenceable,
            anchor=start,
        )

    # Already-ordered stops keep their relative order; gaps and duplicates are
    # closed so the route ends up numbered base, base+1, ... without holes.
    already_ordered = sorted((stop for stop in sequenceable if stop.order is not None), key=lambda stop: stop.order)
    assignments: dict[str, int] = {}
    next_order = base
    for stop in already_ordered:
        if stop.order != next_order:
            stop.order = next_order
            assignments[stop.id] = next_order
        next_order += 1

    pending = [stop for stop in sequenceable if stop.order is None]
    current = already_ordered[-1].coordinate if already_ordered else start
    while pending:
        nearest = _nearest(current, pending)
        nearest.order = next_order
        assignments[nearest.id] = next_order
        pending.remove(nearest)
        current = nearest.coordinate
        next_order += 1

    visiting_order = sorted(sequenceable, key=lambda stop: stop.order)
    total = path_length(start, [stop.coordinate for stop in visiting_order])

    logging.info(
        f"Route {route_id}: assigned {len(assignments)} orders "
        f"({len(visiting_order)} ordered, {len(unsequenceable)} without coordinates)"
    )
    return SequenceResult(
        route_id=route_id,
        status=SequenceStatus.OPTIMIZED,
        ordered_stop_ids=[stop.id for stop in visiting_order],
        unsequenceable=unsequenceable,
        assignments=assignments,
        anchor=start,
        path_length=total,
    )
